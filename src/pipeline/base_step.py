"""
Base class for per-unit pipeline steps.
"""
from abc import ABC, abstractmethod

from src.engine.errors import StageError
from src.schemas import UnitState
from src.utils.core.logger import get_logger
from .context import PipelineContext, UnitRun


class BaseStep(ABC):
    """Base class for all pipeline steps."""

    # State the unit is in while the step executes (None: unchanged)
    entered_state: UnitState | None = None

    def __init__(self, context: PipelineContext):
        """
        Initialize step.

        Args:
            context: Shared components and settings
        """
        self.context = context
        self.logger = get_logger(self.__class__.__name__)

    @property
    @abstractmethod
    def name(self) -> str:
        """Step name for logging and the unit report."""
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Display name for console output."""
        pass

    @property
    @abstractmethod
    def reached_state(self) -> UnitState:
        """State the unit moves to when the step succeeds."""
        pass

    def should_skip(self, unit_run: UnitRun) -> tuple[bool, str]:
        """
        Check if this unit should be skipped (absorbing Skipped state).

        Returns:
            Tuple of (should_skip: bool, reason: str)
        """
        return False, ""

    @abstractmethod
    def execute(self, unit_run: UnitRun) -> dict:
        """
        Execute the step for one unit.

        Returns:
            Step result dictionary merged into the unit report

        Raises:
            StageError: The unit fails at this stage
        """
        pass

    def run(self, unit_run: UnitRun) -> dict:
        """
        Run the step with skip check and error handling.

        Returns:
            Step result dictionary with ``status`` of success, skipped or failed
        """
        unit_name = unit_run.unit.path.name

        should_skip, reason = self.should_skip(unit_run)
        if should_skip:
            self.logger.info(f"Skipping {unit_name}: {reason}")
            return {"status": "skipped", "stage": self.name, "reason": reason}

        self.logger.info(f"[{unit_name}] {self.display_name}")

        try:
            result = self.execute(unit_run) or {}
            result.setdefault("status", "success")
            return result
        except StageError as e:
            self.logger.error(
                f"{self.display_name} failed for {unit_name}: stage={e.stage} reason={e.reason}"
                + (f"\n{e.detail}" if e.detail else "")
            )
            return {"status": "failed", "stage": e.stage, "reason": e.reason, "detail": e.detail}
        except Exception as e:
            self.logger.error(f"{self.display_name} failed for {unit_name}: {e}", exc_info=True)
            return {"status": "failed", "stage": self.name, "reason": str(e)}
