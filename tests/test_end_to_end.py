"""
Real toolchain run: g++ + gcov + GoogleTest. Skipped when any of them is missing.
"""
from __future__ import annotations

import shutil
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.engine.coverage_gate import CoverageGate
from src.engine.errors import CompileError
from src.parser import CppDiscovery
from src.pipeline import Pipeline
from src.sandbox import SandboxRunner
from src.schemas import SandboxSettings, UnitState
from src.utils.core.config import Config

GTEST_HEADER_DIRS = ["/usr/include", "/usr/local/include", "/opt/homebrew/opt/googletest/include"]
# /usr/include is searched by default; passing it with -I breaks <cmath>
GTEST_INCLUDE_DIRS = GTEST_HEADER_DIRS[1:]
GTEST_LIB_DIRS = ["/usr/lib", "/usr/local/lib", "/opt/homebrew/opt/googletest/lib"]

pytestmark = pytest.mark.skipif(
    not (
        shutil.which("g++")
        and shutil.which("gcov")
        and any((Path(d) / "gtest" / "gtest.h").exists() for d in GTEST_HEADER_DIRS)
    ),
    reason="g++, gcov and GoogleTest are required",
)

CALC_H = """#pragma once

class Calculator {
public:
    int add(int a, int b);
    int subtract(int a, int b);
};
"""

CALC_CPP = """#include "calc.h"

int Calculator::add(int a, int b) {
    return a + b;
}

int Calculator::subtract(int a, int b) {
    return a - b;
}
"""

CALC_TEST = '''#include <gtest/gtest.h>
#include <cmath>
#include <stdexcept>
#include "calc.h"

TEST(CalculatorTest, Add_PositiveNumbers) {
    Calculator calc;
    EXPECT_EQ(calc.add(2, 3), 5);
}

TEST(CalculatorTest, Add_NegativeNumbers) {
    Calculator calc;
    EXPECT_EQ(calc.add(-2, -3), -5);
}

TEST(CalculatorTest, Subtract_PositiveNumbers) {
    Calculator calc;
    EXPECT_EQ(calc.subtract(5, 3), 2);
}

TEST(CalculatorTest, Subtract_NegativeNumbers) {
    Calculator calc;
    EXPECT_EQ(calc.subtract(-5, -3), -2);
}'''


class _FixedBackend:
    def list(self):
        return {"models": [{"model": "primary"}]}

    def generate(self, model, prompt, options, stream):
        return iter([{"response": CALC_TEST}])


def _codebase(tmp_path: Path) -> Path:
    codebase = tmp_path / "codebase"
    codebase.mkdir()
    (codebase / "calc.h").write_text(CALC_H, encoding="utf-8")
    (codebase / "calc.cpp").write_text(CALC_CPP, encoding="utf-8")
    return codebase


def _settings() -> SandboxSettings:
    return SandboxSettings(include_dirs=GTEST_INCLUDE_DIRS, lib_dirs=GTEST_LIB_DIRS)


def test_sandbox_measures_real_coverage(tmp_path: Path) -> None:
    (unit,) = CppDiscovery().discover(_codebase(tmp_path))

    run = SandboxRunner(_settings()).run(CALC_TEST, unit, "calc_test.cpp")
    result = CoverageGate().evaluate(run.coverage.combined, run.source_file)

    assert result.passed
    assert result.percent == 100.0
    assert not run.workdir.exists()


def test_sandbox_rejects_uncompilable_candidate(tmp_path: Path) -> None:
    (unit,) = CppDiscovery().discover(_codebase(tmp_path))
    broken = CALC_TEST.replace("EXPECT_EQ(calc.add(2, 3), 5);", "EXPECT_EQ(calc.multiply(2, 3), 6);")

    with pytest.raises(CompileError):
        SandboxRunner(_settings()).run(broken, unit, "calc_test.cpp")


def test_pipeline_persists_passing_suite(tmp_path: Path, monkeypatch) -> None:
    for name in ("OLLAMA_HOST", "OLLAMA_MODEL", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    _codebase(tmp_path)
    config = Config(REPO_ROOT / "configs" / "pipeline.yaml")
    config.set("llm.model", "primary")
    config.set("sandbox.include_dirs", GTEST_INCLUDE_DIRS)
    config.set("sandbox.lib_dirs", GTEST_LIB_DIRS)
    for key, sub in (("input_dir", "codebase"), ("output_dir", "out"), ("debug_dir", "debug"), ("reports_dir", "reports")):
        config.set(f"paths.{key}", str(tmp_path / sub))

    summary = Pipeline(config, backend=_FixedBackend()).run()

    (report,) = summary.units
    assert report.state == UnitState.PERSISTED
    assert (tmp_path / "out" / "calc_test.cpp").read_text(encoding="utf-8") == CALC_TEST
