from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


class ReasonCode(str, Enum):
    """Why a candidate was rejected by the output validator."""
    TOO_SHORT = "too-short"
    MISSING_INCLUDE = "missing-include"
    MISSING_TEST_MACRO = "missing-TEST-macro"
    INCOMPLETE_MACRO_BODY = "incomplete-macro-body"
    WRONG_TEST_COUNT = "wrong-test-count"
    MISSING_SYMBOL = "missing-symbol"
    UNBALANCED_BRACES = "unbalanced-braces"


class Accepted(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["accepted"] = "accepted"
    text: str


class Rejected(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["rejected"] = "rejected"
    reason: ReasonCode
    detail: str = ""

    def __str__(self) -> str:
        return f"{self.reason.value}: {self.detail}" if self.detail else self.reason.value


ValidationVerdict = Union[Accepted, Rejected]
