from __future__ import annotations

import re
import sys
from pathlib import Path

import orjson
import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import main as cli
from src.engine.errors import CompileError, InfrastructureError
from src.pipeline import Pipeline
from src.schemas import ProcessOutput, SandboxRun, SourceUnit, UnitState
from src.utils import read_json, read_jsonl
from src.utils.core.config import Config

TEST_TEMPLATE = '''#include <gtest/gtest.h>
#include <cmath>
#include <stdexcept>
#include "{header}"

TEST(CalculatorTest, Add_PositiveNumbers) {{
    Calculator calc;
    EXPECT_EQ(calc.add(2, 3), 5);
}}

TEST(CalculatorTest, Add_NegativeNumbers) {{
    Calculator calc;
    EXPECT_EQ(calc.add(-2, -3), -5);
}}

TEST(CalculatorTest, Subtract_PositiveNumbers) {{
    Calculator calc;
    EXPECT_EQ(calc.subtract(5, 3), 2);
}}

TEST(CalculatorTest, Subtract_NegativeNumbers) {{
    Calculator calc;
    EXPECT_EQ(calc.subtract(-5, -3), -2);
}}'''

_HEADER_INCLUDE = re.compile(r'#include "([^"]+)"')


class _EchoBackend:
    """Answers every prompt with a valid suite for the header the prompt asks for."""

    def __init__(self, models=("primary",)):
        self.models = list(models)
        self.calls: list[str] = []

    def list(self):
        return {"models": [{"model": name} for name in self.models]}

    def generate(self, model, prompt, options, stream):
        self.calls.append(model)
        header = _HEADER_INCLUDE.search(prompt).group(1)
        return iter([{"response": "```cpp\n" + TEST_TEMPLATE.format(header=header) + "\n```"}])


class _UnreachableBackend(_EchoBackend):
    def list(self):
        raise ConnectionError("connection refused")


class _StubRunner:
    """Pretends to compile; units listed in ``broken`` fail to compile."""

    def __init__(self, percent: float = 92.5, broken: tuple[str, ...] = ()):
        self.percent = percent
        self.broken = broken
        self.calls: list[tuple[str, str]] = []

    def run(self, test_text: str, unit: SourceUnit, test_filename: str) -> SandboxRun:
        self.calls.append((unit.stem, test_filename))
        if unit.stem in self.broken:
            raise CompileError(ProcessOutput(args=["g++"], returncode=1, stderr=f"{test_filename}:1:1: error: boom"))
        source = unit.implementation_path.name
        passed = ProcessOutput(args=["x"], returncode=0)
        return SandboxRun(
            workdir=Path("/tmp/sandbox"),
            binary_path=Path("/tmp/sandbox/run_tests"),
            test_file=test_filename,
            source_file=source,
            compile=passed,
            run=passed,
            coverage=ProcessOutput(
                args=["gcov"],
                returncode=0,
                stdout=f"File '{source}'\nLines executed:{self.percent:.2f}% of 8\n",
            ),
        )


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch) -> None:
    for name in ("OLLAMA_HOST", "OLLAMA_MODEL", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def _codebase(root: Path, paired=("alpha", "beta", "gamma"), lonely=("lonely",)) -> Path:
    codebase = root / "codebase"
    codebase.mkdir(parents=True, exist_ok=True)
    for stem in paired:
        (codebase / f"{stem}.h").write_text("int add(int a, int b);\nint subtract(int a, int b);\n", encoding="utf-8")
        (codebase / f"{stem}.cpp").write_text(f'#include "{stem}.h"\n', encoding="utf-8")
    for stem in lonely:
        (codebase / f"{stem}.cpp").write_text("int f() { return 0; }\n", encoding="utf-8")
    return codebase


def _config(root: Path) -> Config:
    config_path = root / "pipeline.yaml"
    config_path.write_text(
        "llm:\n"
        "  model: primary\n"
        "  backoff_sec: 0\n"
        "paths:\n"
        f"  input_dir: {root / 'codebase'}\n"
        f"  output_dir: {root / 'out'}\n"
        f"  debug_dir: {root / 'debug'}\n"
        f"  reports_dir: {root / 'reports'}\n",
        encoding="utf-8",
    )
    return Config(config_path)


def test_units_fail_independently(tmp_path: Path) -> None:
    _codebase(tmp_path)
    runner = _StubRunner(broken=("beta",))

    summary = Pipeline(_config(tmp_path), backend=_EchoBackend(), runner=runner).run()

    states = {Path(report.source_path).name: report for report in summary.units}
    assert [Path(report.source_path).name for report in summary.units] == [
        "alpha.cpp", "beta.cpp", "gamma.cpp", "lonely.cpp",
    ]
    assert states["alpha.cpp"].state == UnitState.PERSISTED
    assert states["gamma.cpp"].state == UnitState.PERSISTED
    assert states["beta.cpp"].state == UnitState.FAILED
    assert states["beta.cpp"].stage == "compile"
    assert states["beta.cpp"].reason == "compile-failed"
    assert "error: boom" in states["beta.cpp"].detail
    assert states["lonely.cpp"].state == UnitState.SKIPPED
    assert states["lonely.cpp"].stage == "pairing"

    assert [stem for stem, _ in runner.calls] == ["alpha", "beta", "gamma"]
    assert summary.totals() == {"total": 4, "persisted": 2, "skipped": 1, "failed": 1}


def test_persisted_file_is_the_accepted_candidate(tmp_path: Path) -> None:
    _codebase(tmp_path, paired=("alpha",), lonely=())

    summary = Pipeline(_config(tmp_path), backend=_EchoBackend(), runner=_StubRunner()).run()

    (report,) = summary.units
    output = tmp_path / "out" / "alpha_test.cpp"
    assert report.output_path == str(output)
    assert report.backend == "primary"
    assert report.attempt == 1
    assert report.coverage_percent == 92.5
    # fences stripped, content otherwise untouched
    assert output.read_text(encoding="utf-8") == TEST_TEMPLATE.format(header="alpha.h")


def test_coverage_below_threshold_is_not_persisted(tmp_path: Path) -> None:
    _codebase(tmp_path, paired=("alpha",), lonely=())

    summary = Pipeline(_config(tmp_path), backend=_EchoBackend(), runner=_StubRunner(percent=79.99)).run()

    (report,) = summary.units
    assert report.state == UnitState.FAILED
    assert report.stage == "coverage"
    assert report.reason == "coverage-below-threshold"
    assert report.coverage_percent == 79.99
    assert not (tmp_path / "out" / "alpha_test.cpp").exists()


def test_reports_are_written(tmp_path: Path) -> None:
    _codebase(tmp_path)

    Pipeline(_config(tmp_path), backend=_EchoBackend(), runner=_StubRunner(broken=("beta",))).run()

    rows = read_jsonl(tmp_path / "reports" / "units.jsonl")
    assert [row["state"] for row in rows] == ["persisted", "failed", "persisted", "skipped"]

    summary = read_json(tmp_path / "reports" / "run_summary.json")
    assert summary["end_time"] is not None
    assert len(summary["units"]) == 4
    assert summary["totals"] == {"total": 4, "persisted": 2, "skipped": 1, "failed": 1}
    assert (tmp_path / "debug" / "alpha" / "raw_response_primary_attempt_1.txt").exists()


def test_unreachable_backend_aborts_before_any_unit(tmp_path: Path) -> None:
    _codebase(tmp_path)
    runner = _StubRunner()

    with pytest.raises(InfrastructureError):
        Pipeline(_config(tmp_path), backend=_UnreachableBackend(), runner=runner).run()

    assert runner.calls == []
    assert not (tmp_path / "reports" / "units.jsonl").exists()


def test_missing_input_directory_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(InfrastructureError):
        Pipeline(_config(tmp_path), backend=_EchoBackend(), runner=_StubRunner()).run()


def test_empty_codebase_completes(tmp_path: Path) -> None:
    _codebase(tmp_path, paired=(), lonely=())

    summary = Pipeline(_config(tmp_path), backend=_EchoBackend(), runner=_StubRunner()).run()

    assert summary.units == []
    assert orjson.loads((tmp_path / "reports" / "run_summary.json").read_bytes())["units"] == []


def test_cli_overrides_are_applied(tmp_path: Path) -> None:
    config_path = tmp_path / "pipeline.yaml"
    config_path.write_text("{}\n", encoding="utf-8")
    args = cli.build_parser().parse_args([
        "--config", str(config_path),
        "--input-dir", str(tmp_path / "src"),
        "--output-dir", str(tmp_path / "tests_out"),
        "--model", "codellama:13b",
        "--log-level", "DEBUG",
    ])

    config = cli.load_config(args)

    assert config.get("paths.input_dir") == str(tmp_path / "src")
    assert config.get("paths.output_dir") == str(tmp_path / "tests_out")
    assert config.generation_settings().model == "codellama:13b"
    assert config.get("logging.level") == "DEBUG"


def test_cli_missing_config_exits_nonzero(tmp_path: Path) -> None:
    assert cli.main(["--config", str(tmp_path / "missing.yaml")]) == 1


def test_cli_invalid_setting_exits_nonzero(tmp_path: Path) -> None:
    config_path = tmp_path / "pipeline.yaml"
    config_path.write_text(
        "llm:\n"
        "  timeout_sec: 0\n"
        "logging:\n"
        f"  file: {tmp_path / 'logs' / 'run.log'}\n",
        encoding="utf-8",
    )

    assert cli.main(["--config", str(config_path)]) == 1
