"""
Step 1: Pairing check
"""
from src.pipeline.base_step import BaseStep
from src.pipeline.context import UnitRun
from src.schemas import UnitState


class PairingStep(BaseStep):
    """Refuse units whose header/implementation counterpart is missing."""

    @property
    def name(self) -> str:
        return "pairing"

    @property
    def display_name(self) -> str:
        return "Step 1: Checking Header/Implementation Pairing"

    @property
    def reached_state(self) -> UnitState:
        return UnitState.PAIRING_CHECKED

    def should_skip(self, unit_run: UnitRun) -> tuple[bool, str]:
        unit = unit_run.unit
        if not unit.has_companion:
            return True, f"corresponding {unit.companion_path.suffix} file not found: {unit.companion_path}"
        return False, ""

    def execute(self, unit_run: UnitRun) -> dict:
        return {}
