"""
Generated test output validation.

A cheap, purely syntactic gate run on every normalized candidate before it is
allowed anywhere near the compiler. Rules are evaluated in a fixed order and
the first violation decides the reason code; the compiler stays the
authoritative correctness check.
"""
import re
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from src.schemas import (
    Accepted,
    ReasonCode,
    Rejected,
    SourceUnit,
    TestRequirements,
    ValidationVerdict,
)


class ValidationRules(BaseModel):
    """The concrete checklist for one SourceUnit."""
    model_config = ConfigDict(frozen=True)

    min_length: int = 250
    required_includes: tuple[str, ...] = Field(default=())
    test_macro: str = "TEST"
    suite_name: str = "CalculatorTest"
    expected_test_count: int = 4
    target_symbols: tuple[str, ...] = Field(default=())

    @classmethod
    def for_unit(cls, requirements: TestRequirements, unit: SourceUnit) -> "ValidationRules":
        symbols = unit.target_symbols or tuple(requirements.target_symbols)
        return cls(
            min_length=requirements.min_length,
            required_includes=required_includes(requirements, unit),
            test_macro=requirements.test_macro,
            suite_name=requirements.suite_name,
            expected_test_count=requirements.tests_per_symbol * len(symbols),
            target_symbols=tuple(symbols),
        )


def required_includes(requirements: TestRequirements, unit: SourceUnit) -> tuple[str, ...]:
    """System includes in configured order followed by the unit's own header."""
    includes = [f"#include <{header}>" for header in requirements.system_includes]
    includes.append(f'#include "{unit.header_path.name}"')
    return tuple(includes)


def _check_length(text: str, rules: ValidationRules) -> Rejected | None:
    if len(text) < rules.min_length:
        return Rejected(
            reason=ReasonCode.TOO_SHORT,
            detail=f"output too short ({len(text)} < {rules.min_length} chars)",
        )
    return None


def _check_includes(text: str, rules: ValidationRules) -> Rejected | None:
    for include in rules.required_includes:
        if include not in text:
            return Rejected(reason=ReasonCode.MISSING_INCLUDE, detail=include)
    return None


def _check_test_macro(text: str, rules: ValidationRules) -> Rejected | None:
    if rules.test_macro not in text:
        return Rejected(reason=ReasonCode.MISSING_TEST_MACRO, detail=f"no {rules.test_macro} macro")
    return None


def _check_incomplete_body(text: str, rules: ValidationRules) -> Rejected | None:
    # A declaration whose body never closes before end of text: truncated generation.
    pattern = re.compile(rf"{re.escape(rules.test_macro)}\([^)]+\)\s*{{[^}}]*$")
    if pattern.search(text):
        return Rejected(
            reason=ReasonCode.INCOMPLETE_MACRO_BODY,
            detail=f"incomplete {rules.test_macro} body at end of output",
        )
    return None


def _check_test_count(text: str, rules: ValidationRules) -> Rejected | None:
    pattern = re.compile(
        rf"\b{re.escape(rules.test_macro)}\({re.escape(rules.suite_name)},"
    )
    found = len(pattern.findall(text))
    if found != rules.expected_test_count:
        return Rejected(
            reason=ReasonCode.WRONG_TEST_COUNT,
            detail=(
                f"expected exactly {rules.expected_test_count} "
                f"{rules.test_macro}({rules.suite_name}, ...) cases, found {found}"
            ),
        )
    return None


def _check_symbols(text: str, rules: ValidationRules) -> Rejected | None:
    missing = [
        symbol
        for symbol in rules.target_symbols
        if not re.search(rf"\b{re.escape(symbol)}\(", text)
    ]
    if missing:
        return Rejected(reason=ReasonCode.MISSING_SYMBOL, detail=", ".join(missing))
    return None


def _check_braces(text: str, rules: ValidationRules) -> Rejected | None:
    balance = text.count("{") - text.count("}")
    if balance != 0:
        return Rejected(
            reason=ReasonCode.UNBALANCED_BRACES,
            detail=f"unbalanced braces (count: {balance})",
        )
    return None


CHECKS: tuple[Callable[[str, ValidationRules], Rejected | None], ...] = (
    _check_length,
    _check_includes,
    _check_test_macro,
    _check_incomplete_body,
    _check_test_count,
    _check_symbols,
    _check_braces,
)


def validate_output(text: str, rules: ValidationRules) -> ValidationVerdict:
    """
    Run the structural checklist over normalized candidate text.

    Args:
        text: Normalized (fence/whitespace stripped) generated test code
        rules: Checklist for the SourceUnit being tested

    Returns:
        ``Rejected`` carrying the first violated rule, or ``Accepted(text)``
    """
    for check in CHECKS:
        rejection = check(text, rules)
        if rejection is not None:
            return rejection
    return Accepted(text=text)
