"""
Pipeline orchestrator for unit test generation.
"""
from pathlib import Path
from typing import Any, Sequence

from src.engine.coverage_gate import CoverageGate
from src.engine.errors import InfrastructureError
from src.engine.llm_client import GenerationClient
from src.engine.prompt_builder import PromptBuilder
from src.parser import BaseDiscovery, CppDiscovery
from src.sandbox import SandboxRunner
from src.schemas import RunSummary, SourceUnit, UnitReport, UnitState, now_iso
from src.utils.core.config import Config
from src.utils.core.logger import get_logger
from src.utils.io.file_ops import append_jsonl, write_json
from .base_step import BaseStep
from .context import PipelineContext, UnitRun
from .steps import STEP_CLASSES

logger = get_logger(__name__)

UNITS_LOG_NAME = "units.jsonl"
SUMMARY_NAME = "run_summary.json"


class Pipeline:
    """Main pipeline orchestrator.

    Units are processed strictly one at a time in discovery order. A failure
    inside a unit is recorded in its report and never stops the run; only
    startup problems raise ``InfrastructureError``.
    """

    def __init__(
        self,
        config: Config,
        backend: Any | None = None,
        discovery: BaseDiscovery | None = None,
        runner: SandboxRunner | None = None,
    ):
        """
        Initialize pipeline.

        Args:
            config: Loaded configuration
            backend: Generation backend override (defaults to ``ollama.Client``)
            discovery: Source discovery override
            runner: Sandbox runner override
        """
        self.config = config

        logger.info("=" * 70)
        logger.info(" Unit Test Generation Pipeline")
        logger.info("=" * 70)
        logger.info(f"Configuration: {config.config_path or 'built-in defaults'}")

        self.paths = config.path_settings()
        self.requirements = config.test_requirements()
        self.generation = config.generation_settings()

        self.discovery = discovery or CppDiscovery(config.discovery_settings(), self.requirements)
        self.client = GenerationClient(self.generation, self.paths.debug_dir, backend=backend)
        self.context = PipelineContext(
            paths=self.paths,
            requirements=self.requirements,
            generation=self.generation,
            client=self.client,
            prompt_builder=PromptBuilder(self.requirements),
            runner=runner or SandboxRunner(config.sandbox_settings(), self.requirements.language_standard),
            gate=CoverageGate(config.coverage_settings()),
        )

        self.units_log = Path(self.paths.reports_dir) / UNITS_LOG_NAME
        self.summary_path = Path(self.paths.reports_dir) / SUMMARY_NAME

    def build_steps(self) -> list[BaseStep]:
        return [step_cls(self.context) for step_cls in STEP_CLASSES]

    def prepare(self) -> None:
        """
        Create output directories and discover the available backends.

        Raises:
            InfrastructureError: Directories cannot be created or the backend is unreachable
        """
        try:
            self.config.ensure_output_dirs()
        except OSError as e:
            raise InfrastructureError(f"Failed to create output directories: {e}") from e

        # BackendUnavailableError is already an InfrastructureError
        models = self.client.list_models()
        logger.info(f"Models served by {self.generation.host}: {models}")
        if self.generation.model not in models:
            logger.warning(f"Primary model {self.generation.model} is not listed by the backend")
        self.context.available_models = models

    def discover(self) -> list[SourceUnit]:
        try:
            return self.discovery.discover(self.paths.input_dir)
        except FileNotFoundError as e:
            raise InfrastructureError(str(e)) from e

    def run(self) -> RunSummary:
        """
        Run the complete pipeline over the input directory.

        Returns:
            RunSummary with one report per discovered unit

        Raises:
            InfrastructureError: Startup failure; no unit is processed
        """
        self.prepare()
        units = self.discover()

        summary = RunSummary(
            config_file=str(self.config.config_path) if self.config.config_path else None,
            input_dir=str(self.paths.input_dir),
            output_dir=str(self.paths.output_dir),
        )

        steps = self.build_steps()
        for index, unit in enumerate(units, start=1):
            logger.info("-" * 70)
            logger.info(f"[{index}/{len(units)}] Processing file: {unit.path}")
            report = self.process_unit(unit, steps)
            summary.units.append(report)
            append_jsonl(self.units_log, report.model_dump(mode="json"))

        self.write_summary(summary)
        return summary

    def process_unit(self, unit: SourceUnit, steps: Sequence[BaseStep] | None = None) -> UnitReport:
        """
        Drive one unit through the stages until it reaches a terminal state.

        Returns:
            UnitReport in state persisted, skipped or failed
        """
        report = UnitReport(source_path=str(unit.path), source_hash=unit.content_hash)
        unit_run = UnitRun(unit=unit, report=report)

        for step in steps if steps is not None else self.build_steps():
            if step.entered_state is not None:
                report.state = step.entered_state

            result = step.run(unit_run)
            status = result.get("status")

            if unit_run.candidate is not None:
                report.backend = unit_run.candidate.backend
                report.attempt = unit_run.candidate.attempt

            if status == "skipped":
                report.state = UnitState.SKIPPED
                report.stage = result.get("stage")
                report.reason = result.get("reason")
                break
            if status == "failed":
                report.state = UnitState.FAILED
                report.stage = result.get("stage")
                report.reason = result.get("reason")
                report.detail = result.get("detail") or None
                break

            report.state = step.reached_state
            if "output_path" in result:
                report.output_path = result["output_path"]

        report.finished_at = now_iso()
        logger.info(f"Finished {unit.path.name}: {report.state.value}")
        return report

    def write_summary(self, summary: RunSummary) -> None:
        """Write run summary to file."""
        summary.end_time = now_iso()
        totals = summary.totals()
        data = summary.model_dump(mode="json")
        data["totals"] = totals
        write_json(self.summary_path, data)

        logger.info("=" * 70)
        logger.info(" Pipeline Completed")
        logger.info("=" * 70)
        logger.info(
            f"Units: {totals['total']} total, {totals['persisted']} persisted, "
            f"{totals['skipped']} skipped, {totals['failed']} failed"
        )
        for report in summary.persisted:
            logger.info(f"Unit tests: {report.output_path}")
        logger.info(f"Summary written to: {self.summary_path}")
        logger.info("=" * 70)
