"""
Coverage gate - parse gcov text output and enforce the line coverage threshold.
"""
import re

from src.schemas import CoverageResult, CoverageSettings
from src.utils.core.logger import get_logger
from .errors import CoverageParseError

logger = get_logger(__name__)

_LINES_EXECUTED = re.compile(r"Lines executed:\s*([\d.]+)% of (\d+)")
_FILE_SECTION = re.compile(r"File '([^']+)'\s*\n\s*Lines executed:\s*([\d.]+)% of (\d+)")


def parse_coverage_report(report: str, source_name: str | None = None) -> tuple[float, int]:
    """
    Extract ``(percent, total_lines)`` from a gcov report.

    When ``source_name`` is given and the report has a ``File '<name>'``
    section for it, that section wins; otherwise the first
    ``Lines executed`` line is used.

    Raises:
        CoverageParseError: No ``Lines executed:X% of N`` line in the report
    """
    if source_name:
        for match in _FILE_SECTION.finditer(report):
            reported = match.group(1).replace("\\", "/").rsplit("/", 1)[-1]
            if reported == source_name:
                return float(match.group(2)), int(match.group(3))

    match = _LINES_EXECUTED.search(report)
    if not match:
        raise CoverageParseError(report)
    return float(match.group(1)), int(match.group(2))


class CoverageGate:
    """Accept/reject decision against a fixed minimum (inclusive) threshold."""

    def __init__(self, settings: CoverageSettings | None = None):
        self.settings = settings or CoverageSettings()

    @property
    def threshold(self) -> float:
        return self.settings.threshold

    def evaluate(self, report: str, source_name: str | None = None) -> CoverageResult:
        percent, total = parse_coverage_report(report, source_name)
        passed = percent >= self.threshold
        logger.info(f"Code coverage: {percent:.2f}% of {total} lines (threshold {self.threshold:.2f}%)")
        return CoverageResult(
            percent=percent,
            total_lines=total,
            threshold=self.threshold,
            passed=passed,
        )
