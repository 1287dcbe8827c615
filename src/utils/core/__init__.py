"""
Core - 核心基础设施模块

包含配置管理和日志。
"""

from .config import Config, DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from .logger import get_logger, configure_logging, LoggerManager

__all__ = [
    # Config
    "Config",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_PATH",
    # Logger
    "get_logger",
    "configure_logging",
    "LoggerManager",
]
