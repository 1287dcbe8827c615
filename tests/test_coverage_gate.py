from __future__ import annotations

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.engine.coverage_gate import CoverageGate, parse_coverage_report
from src.engine.errors import CoverageParseError
from src.schemas import CoverageSettings


def _report(percent: str, total: int = 10, name: str = "calc.cpp") -> str:
    return (
        f"File '{name}'\n"
        f"Lines executed:{percent}% of {total}\n"
        f"Creating '{name}.gcov'\n"
    )


def test_parse_single_file_report() -> None:
    assert parse_coverage_report(_report("85.71", 7)) == (85.71, 7)


def test_parse_prefers_named_source_section() -> None:
    report = _report("100.00", 20, "calc_test.cpp") + "\n" + _report("50.00", 4, "/tmp/sandbox/calc.cpp")

    assert parse_coverage_report(report, "calc.cpp") == (50.0, 4)
    assert parse_coverage_report(report) == (100.0, 20)


def test_parse_falls_back_to_first_summary_line() -> None:
    report = "Lines executed:90.00% of 10\n"
    assert parse_coverage_report(report, "calc.cpp") == (90.0, 10)


def test_unparseable_report_raises() -> None:
    with pytest.raises(CoverageParseError) as excinfo:
        parse_coverage_report("calc.gcno:cannot open notes file\n")

    assert excinfo.value.reason == "coverage-parse-failed"
    assert excinfo.value.stage == "coverage"


@pytest.mark.parametrize(
    ("percent", "passed"),
    [("79.99", False), ("80.00", True), ("80.01", True), ("100.00", True), ("0.00", False)],
)
def test_threshold_is_inclusive(percent: str, passed: bool) -> None:
    result = CoverageGate().evaluate(_report(percent), "calc.cpp")

    assert result.passed is passed
    assert result.percent == float(percent)
    assert result.threshold == 80.0


def test_custom_threshold() -> None:
    gate = CoverageGate(CoverageSettings(threshold=95.0))

    assert gate.threshold == 95.0
    assert not gate.evaluate(_report("90.00")).passed
