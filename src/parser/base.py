"""
Discovery 抽象基类 - 定义源文件发现的统一接口
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generator

from src.schemas import DiscoverySettings, SourceUnit, TestRequirements


class BaseDiscovery(ABC):
    """源文件发现抽象基类

    Concrete discoveries walk an input directory and turn the files they find
    into ``SourceUnit`` objects for the pipeline.
    """

    def __init__(
        self,
        settings: DiscoverySettings | None = None,
        requirements: TestRequirements | None = None,
    ):
        self.settings = settings or DiscoverySettings()
        self.requirements = requirements or TestRequirements()
        self.file_extensions = list(self.settings.extensions)
        self.ignore_paths = list(self.settings.ignore_paths)

    @abstractmethod
    def discover(self, input_dir: str | Path) -> list[SourceUnit]:
        """
        发现输入目录中的所有 SourceUnit

        Raises:
            FileNotFoundError: input_dir 不存在或不是目录
        """
        raise NotImplementedError("Subclass must implement discover()")

    def should_ignore(self, path: Path) -> bool:
        """
        判断路径是否应该被忽略

        Args:
            path: 待检查的路径

        Returns:
            bool: True 表示应忽略
        """
        path_str = path.as_posix()
        for pattern in self.ignore_paths:
            if pattern in path_str:
                return True
        return False

    def iter_source_files(self, input_dir: Path) -> Generator[Path, None, None]:
        """
        迭代目录中的源码文件（按路径排序，保证处理顺序可复现）

        Yields:
            Path: 源码文件路径
        """
        for path in sorted(input_dir.rglob("*")):
            if not path.is_file() or path.suffix not in self.file_extensions:
                continue
            if self.should_ignore(path):
                continue
            yield path
