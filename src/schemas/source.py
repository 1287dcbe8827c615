from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .base import sha256_text

HEADER_SUFFIXES = (".h", ".hpp", ".hh")


class SourceUnit(BaseModel):
    """一个待生成测试的源文件（头文件与实现文件成对出现）"""
    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="源文件路径（唯一标识）")
    content: str = Field(..., description="源文件原始文本")
    companion_path: Path = Field(..., description="推断出的配对文件路径（.h <-> .cpp）")
    companion_content: str | None = Field(default=None, description="配对文件文本，不存在时为 None")
    target_symbols: tuple[str, ...] = Field(default=(), description="测试必须调用的符号")

    @property
    def has_companion(self) -> bool:
        return self.companion_content is not None

    @property
    def is_header(self) -> bool:
        return self.path.suffix in HEADER_SUFFIXES

    @property
    def header_path(self) -> Path:
        return self.path if self.is_header else self.companion_path

    @property
    def implementation_path(self) -> Path:
        return self.companion_path if self.is_header else self.path

    @property
    def header_content(self) -> str | None:
        return self.content if self.is_header else self.companion_content

    @property
    def implementation_content(self) -> str | None:
        return self.companion_content if self.is_header else self.content

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def content_hash(self) -> str:
        return sha256_text(f"{self.content}\0{self.companion_content or ''}")
