"""
Step 3: Compile, run and measure in a sandbox
"""
from src.pipeline.base_step import BaseStep
from src.pipeline.context import UnitRun
from src.schemas import UnitState


class SandboxStep(BaseStep):
    """Compile the accepted candidate against the real source and execute it."""

    @property
    def name(self) -> str:
        return "compile"

    @property
    def display_name(self) -> str:
        return "Step 3: Compiling and Running Tests"

    @property
    def reached_state(self) -> UnitState:
        return UnitState.COMPILED

    def execute(self, unit_run: UnitRun) -> dict:
        if unit_run.accepted_text is None:
            raise RuntimeError("no accepted candidate to compile")

        unit_run.sandbox_run = self.context.runner.run(
            unit_run.accepted_text,
            unit_run.unit,
            self.context.test_filename(unit_run.unit),
        )
        return {}
