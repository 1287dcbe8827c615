"""
Step 4: Coverage gate
"""
from src.engine.errors import CoverageThresholdError
from src.pipeline.base_step import BaseStep
from src.pipeline.context import UnitRun
from src.schemas import UnitState


class CoverageStep(BaseStep):
    """Parse the coverage report and reject runs below the threshold."""

    @property
    def name(self) -> str:
        return "coverage"

    @property
    def display_name(self) -> str:
        return "Step 4: Checking Coverage"

    @property
    def reached_state(self) -> UnitState:
        return UnitState.COVERAGE_CHECKED

    def execute(self, unit_run: UnitRun) -> dict:
        run = unit_run.sandbox_run
        if run is None:
            raise RuntimeError("no sandbox run to measure")

        result = self.context.gate.evaluate(run.coverage.combined, source_name=run.source_file)
        unit_run.coverage = result
        unit_run.report.coverage_percent = result.percent
        if not result.passed:
            raise CoverageThresholdError(result)

        return {"coverage_percent": result.percent}
