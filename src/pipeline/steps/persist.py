"""
Step 5: Persist accepted tests
"""
from src.engine.errors import PersistenceRefusedError
from src.pipeline.base_step import BaseStep
from src.pipeline.context import UnitRun
from src.schemas import UnitState
from src.utils.io.file_ops import write_text


class PersistStep(BaseStep):
    """Write the test file only for validated, passing, sufficiently covering candidates."""

    @property
    def name(self) -> str:
        return "persist"

    @property
    def display_name(self) -> str:
        return "Step 5: Saving Unit Tests"

    @property
    def reached_state(self) -> UnitState:
        return UnitState.PERSISTED

    def execute(self, unit_run: UnitRun) -> dict:
        if unit_run.accepted_text is None:
            raise PersistenceRefusedError("not-validated")
        if unit_run.sandbox_run is None or unit_run.sandbox_run.run.returncode != 0:
            raise PersistenceRefusedError("tests-did-not-pass")
        if unit_run.coverage is None or not unit_run.coverage.passed:
            raise PersistenceRefusedError("coverage-not-accepted")

        output_path = self.context.output_path(unit_run.unit)
        self.logger.info(
            f"Writing unit tests to {output_path} (coverage: {unit_run.coverage.percent:.2f}%)"
        )
        write_text(output_path, unit_run.accepted_text)

        return {"output_path": str(output_path)}
