"""
I/O - 输入输出操作模块
"""

from .file_ops import (
    read_json,
    write_json,
    read_jsonl,
    append_jsonl,
    write_text,
    load_prompt_template,
    clean_llm_code_output,
    safe_filename,
)

__all__ = [
    "read_json",
    "write_json",
    "read_jsonl",
    "append_jsonl",
    "write_text",
    "load_prompt_template",
    "clean_llm_code_output",
    "safe_filename",
]
