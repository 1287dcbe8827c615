"""
日志工具 - 统一的日志配置和管理
"""
import logging
import sys
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class LoggerManager:
    """日志管理器 - 单例模式

    ``get_logger`` works before ``configure`` is called; handlers are attached
    to the root logger once the entry point has loaded its configuration.
    """

    _instance: Optional['LoggerManager'] = None
    _loggers: dict[str, logging.Logger] = {}
    _configured: bool = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def configure(
        self,
        level: str = "INFO",
        log_format: str = DEFAULT_FORMAT,
        log_file: str | Path | None = None,
    ) -> None:
        """
        设置日志配置

        Args:
            level: 日志级别名称
            log_format: 日志格式
            log_file: 日志文件路径，None 表示只输出到控制台
        """
        handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.insert(0, logging.FileHandler(log_path, encoding='utf-8'))

        logging.basicConfig(
            level=getattr(logging, str(level).upper(), logging.INFO),
            format=log_format,
            handlers=handlers,
            force=self._configured,
        )
        self._configured = True

    def get_logger(self, name: str) -> logging.Logger:
        """
        获取或创建指定名称的日志器

        Args:
            name: 日志器名称（通常使用 __name__）
        """
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(name)
        return self._loggers[name]


_logger_manager = LoggerManager()


def configure_logging(config) -> None:
    """Attach handlers using the ``logging`` section of a ``Config``."""
    _logger_manager.configure(
        level=config.get('logging.level', 'INFO'),
        log_format=config.get('logging.format', DEFAULT_FORMAT),
        log_file=config.get('logging.file'),
    )


def get_logger(name: str = __name__) -> logging.Logger:
    """
    获取日志器的便捷函数

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Processing started")
    """
    return _logger_manager.get_logger(name)
