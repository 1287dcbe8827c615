from enum import Enum

from pydantic import BaseModel, Field

from .base import now_iso


class UnitState(str, Enum):
    DISCOVERED = "discovered"
    PAIRING_CHECKED = "pairing_checked"
    GENERATING = "generating"
    VALIDATED = "validated"
    COMPILED = "compiled"
    COVERAGE_CHECKED = "coverage_checked"
    PERSISTED = "persisted"
    SKIPPED = "skipped"
    FAILED = "failed"


class UnitReport(BaseModel):
    """单个 SourceUnit 的处理结果"""
    source_path: str
    source_hash: str | None = Field(default=None, description="头文件与实现文件内容的 SHA256")
    state: UnitState = UnitState.DISCOVERED
    stage: str | None = Field(default=None, description="失败或跳过所在阶段")
    reason: str | None = None
    detail: str | None = Field(default=None, description="捕获的子进程输出等诊断信息")
    backend: str | None = None
    attempt: int | None = None
    coverage_percent: float | None = None
    output_path: str | None = None
    started_at: str = Field(default_factory=now_iso)
    finished_at: str | None = None


class RunSummary(BaseModel):
    """一次完整运行的汇总 (写入 run_summary.json)"""
    start_time: str = Field(default_factory=now_iso)
    end_time: str | None = None
    config_file: str | None = None
    input_dir: str
    output_dir: str
    units: list[UnitReport] = Field(default_factory=list)

    def count(self, state: UnitState) -> int:
        return sum(1 for unit in self.units if unit.state == state)

    @property
    def persisted(self) -> list[UnitReport]:
        return [unit for unit in self.units if unit.state == UnitState.PERSISTED]

    def totals(self) -> dict[str, int]:
        return {
            "total": len(self.units),
            "persisted": self.count(UnitState.PERSISTED),
            "skipped": self.count(UnitState.SKIPPED),
            "failed": self.count(UnitState.FAILED),
        }
