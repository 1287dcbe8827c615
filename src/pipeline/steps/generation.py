"""
Step 2: Test generation and structural validation
"""
from src.pipeline.base_step import BaseStep
from src.pipeline.context import UnitRun
from src.schemas import UnitState
from src.utils.validator import ValidationRules


class GenerationStep(BaseStep):
    """Sample the backend until a candidate passes the output validator."""

    entered_state = UnitState.GENERATING

    @property
    def name(self) -> str:
        return "generation"

    @property
    def display_name(self) -> str:
        return "Step 2: Generating Unit Tests"

    @property
    def reached_state(self) -> UnitState:
        return UnitState.VALIDATED

    def execute(self, unit_run: UnitRun) -> dict:
        ctx = self.context
        unit = unit_run.unit

        rules = ValidationRules.for_unit(ctx.requirements, unit)
        request = ctx.prompt_builder.build_request(unit, ctx.generation)
        self.logger.info(
            f"Generating unit tests with model {request.model} "
            f"(code length: {len(unit.content)} bytes, prompt: {len(request.prompt)} bytes)"
        )

        candidate, verdict = ctx.client.generate(
            request,
            rules,
            available=ctx.available_models,
            label=unit.stem,
        )
        unit_run.candidate = candidate
        unit_run.accepted_text = verdict.text

        return {"backend": candidate.backend, "attempt": candidate.attempt}
