from __future__ import annotations

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.parser import CppDiscovery, companion_path, infer_declared_symbols
from src.schemas import DiscoverySettings

HEADER = """#pragma once

class Calculator {
public:
    int add(int a, int b);
    int subtract(int a, int b);
    double divide(double a, double b) const;
};
"""


def _write(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_companion_path_swaps_suffix() -> None:
    assert companion_path(Path("src/calc.cpp")) == Path("src/calc.h")
    assert companion_path(Path("src/calc.h")) == Path("src/calc.cpp")


def test_pairs_share_one_unit(tmp_path: Path) -> None:
    _write(tmp_path / "calc.h", HEADER)
    _write(tmp_path / "calc.cpp", '#include "calc.h"\n')
    _write(tmp_path / "lonely.cpp", "int f() { return 1; }\n")
    _write(tmp_path / "README.txt", "not source")

    units = CppDiscovery().discover(tmp_path)

    assert [unit.path.name for unit in units] == ["calc.cpp", "lonely.cpp"]
    calc, lonely = units
    assert calc.has_companion
    assert calc.header_content == HEADER
    assert calc.target_symbols == ("add", "subtract")
    assert not lonely.has_companion
    assert lonely.companion_path == tmp_path / "lonely.h"


def test_header_without_implementation(tmp_path: Path) -> None:
    _write(tmp_path / "only.h", HEADER)

    (unit,) = CppDiscovery().discover(tmp_path)

    assert unit.path.name == "only.h"
    assert unit.is_header
    assert not unit.has_companion
    assert unit.implementation_path == tmp_path / "only.cpp"


def test_nested_directories_and_ignored_paths(tmp_path: Path) -> None:
    _write(tmp_path / "math" / "calc.h")
    _write(tmp_path / "math" / "calc.cpp")
    _write(tmp_path / "util" / "calc.cpp")
    _write(tmp_path / "build" / "gen.cpp")

    discovery = CppDiscovery(DiscoverySettings(ignore_paths=["/build/"]))
    units = discovery.discover(tmp_path)

    assert [unit.path.relative_to(tmp_path).as_posix() for unit in units] == ["math/calc.cpp", "util/calc.cpp"]


def test_missing_input_directory(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        CppDiscovery().discover(tmp_path / "missing")


def test_infer_declared_symbols() -> None:
    assert infer_declared_symbols(HEADER) == ["add", "subtract", "divide"]
    assert infer_declared_symbols("#define ADD(a, b) ((a) + (b))\n") == []


def test_infer_symbols_from_header(tmp_path: Path) -> None:
    _write(tmp_path / "calc.h", HEADER)
    _write(tmp_path / "calc.cpp")
    _write(tmp_path / "empty.h", "#pragma once\n")
    _write(tmp_path / "empty.cpp")

    units = CppDiscovery(DiscoverySettings(infer_symbols=True)).discover(tmp_path)
    by_name = {unit.path.name: unit for unit in units}

    assert by_name["calc.cpp"].target_symbols == ("add", "subtract", "divide")
    assert by_name["empty.cpp"].target_symbols == ("add", "subtract")
