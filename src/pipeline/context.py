"""
Shared pipeline context and per-unit working state.
"""
from dataclasses import dataclass, field
from pathlib import Path

from src.engine.coverage_gate import CoverageGate
from src.engine.llm_client import GenerationClient
from src.engine.prompt_builder import PromptBuilder
from src.sandbox.runner import SandboxRunner
from src.schemas import (
    CandidateOutput,
    CoverageResult,
    GenerationSettings,
    PathSettings,
    SandboxRun,
    SourceUnit,
    TestRequirements,
    UnitReport,
)


@dataclass
class PipelineContext:
    """Components and settings every step receives explicitly."""

    paths: PathSettings
    requirements: TestRequirements
    generation: GenerationSettings
    client: GenerationClient
    prompt_builder: PromptBuilder
    runner: SandboxRunner
    gate: CoverageGate
    available_models: list[str] = field(default_factory=list)

    def test_filename(self, unit: SourceUnit) -> str:
        """``calc.cpp`` -> ``calc_test.cpp``"""
        return f"{unit.stem}{self.paths.test_suffix}{self.paths.test_extension}"

    def output_path(self, unit: SourceUnit) -> Path:
        return Path(self.paths.output_dir) / self.test_filename(unit)


@dataclass
class UnitRun:
    """Mutable state of one SourceUnit travelling through the stages."""

    unit: SourceUnit
    report: UnitReport
    candidate: CandidateOutput | None = None
    accepted_text: str | None = None
    sandbox_run: SandboxRun | None = None
    coverage: CoverageResult | None = None
