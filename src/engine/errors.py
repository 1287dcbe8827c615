"""
Exception hierarchy for the unit test generator.

``InfrastructureError`` aborts the whole run. ``StageError`` fails a single
SourceUnit; the orchestrator logs it and moves on to the next unit.
"""
from src.schemas import CoverageResult, ProcessOutput


class UnitTestGenError(Exception):
    """Base class for every error raised by this package."""


class InfrastructureError(UnitTestGenError):
    """Fatal startup problem (backend unreachable, directories, input)."""


class BackendUnavailableError(InfrastructureError):
    pass


class StageError(UnitTestGenError):
    """A pipeline stage failed for one SourceUnit."""

    stage = "unknown"

    def __init__(self, reason: str, detail: str = ""):
        self.reason = reason
        self.detail = detail
        message = f"[{self.stage}] {reason}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)


class GenerationTransportError(UnitTestGenError):
    """Transport or backend failure of a single generation attempt (retried)."""


class GenerationTimeoutError(GenerationTransportError):
    pass


class GenerationExhaustedError(StageError):
    stage = "generation"

    def __init__(self, attempts: int, last_reason: str | None = None):
        self.attempts = attempts
        self.last_reason = last_reason
        super().__init__(
            "exhausted",
            f"no accepted output after {attempts} attempts"
            + (f" (last: {last_reason})" if last_reason else ""),
        )


class SandboxError(StageError):
    """A compile / run / coverage subprocess failed; carries the captured output."""

    def __init__(self, reason: str, output: ProcessOutput | None = None):
        self.output = output
        super().__init__(reason, output.combined if output else "")


class CompileError(SandboxError):
    stage = "compile"

    def __init__(self, output: ProcessOutput | None = None, reason: str = "compile-failed"):
        super().__init__(reason, output)


class TestRunError(SandboxError):
    __test__ = False
    stage = "run"

    def __init__(self, output: ProcessOutput | None = None, reason: str = "run-failed"):
        super().__init__(reason, output)


class CoverageToolError(SandboxError):
    stage = "coverage-tool"

    def __init__(self, output: ProcessOutput | None = None, reason: str = "coverage-tool-failed"):
        super().__init__(reason, output)


class CoverageParseError(StageError):
    stage = "coverage"

    def __init__(self, report: str):
        self.report = report
        super().__init__("coverage-parse-failed", report)


class CoverageThresholdError(StageError):
    stage = "coverage"

    def __init__(self, result: CoverageResult):
        self.result = result
        super().__init__(
            "coverage-below-threshold",
            f"coverage {result.percent:.2f}% is below {result.threshold:.2f}% threshold",
        )


class PersistenceRefusedError(StageError):
    stage = "persist"
