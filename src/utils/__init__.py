"""
工具模块 - 配置管理、日志、文件读写与输出校验
"""

from .core import Config, get_logger, configure_logging, LoggerManager
from .io import (
    read_json,
    write_json,
    read_jsonl,
    append_jsonl,
    write_text,
    load_prompt_template,
    clean_llm_code_output,
    safe_filename,
)
from .validator import ValidationRules, required_includes, validate_output

__all__ = [
    # Config
    "Config",
    # Logger
    "get_logger",
    "configure_logging",
    "LoggerManager",
    # I/O
    "read_json",
    "write_json",
    "read_jsonl",
    "append_jsonl",
    "write_text",
    "load_prompt_template",
    "clean_llm_code_output",
    "safe_filename",
    # Validator
    "ValidationRules",
    "required_includes",
    "validate_output",
]
