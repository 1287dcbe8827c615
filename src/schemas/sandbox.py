from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ProcessOutput(BaseModel):
    """Captured result of one external process."""
    model_config = ConfigDict(frozen=True)

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def combined(self) -> str:
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


class SandboxRun(BaseModel):
    """编译 / 运行 / 覆盖率三步的执行记录；workdir 在运行结束后已被删除"""
    workdir: Path
    binary_path: Path
    test_file: str
    source_file: str
    compile: ProcessOutput
    run: ProcessOutput
    coverage: ProcessOutput


class CoverageResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    percent: float = Field(..., description="Lines executed 百分比")
    total_lines: int
    threshold: float
    passed: bool
