"""
数据模型包 - 分模块定义的 Pydantic 数据结构
"""

from .base import sha256_text, now_iso
from .source import SourceUnit
from .generation import GenerationRequest, AttemptDescriptor, CandidateOutput
from .verdicts import ReasonCode, Accepted, Rejected, ValidationVerdict
from .sandbox import ProcessOutput, SandboxRun, CoverageResult
from .reports import UnitState, UnitReport, RunSummary
from .settings import (
    GenerationSettings,
    TestRequirements,
    DiscoverySettings,
    SandboxSettings,
    CoverageSettings,
    PathSettings,
)

__all__ = [
    "sha256_text",
    "now_iso",
    "SourceUnit",
    "GenerationRequest",
    "AttemptDescriptor",
    "CandidateOutput",
    "ReasonCode",
    "Accepted",
    "Rejected",
    "ValidationVerdict",
    "ProcessOutput",
    "SandboxRun",
    "CoverageResult",
    "UnitState",
    "UnitReport",
    "RunSummary",
    "GenerationSettings",
    "TestRequirements",
    "DiscoverySettings",
    "SandboxSettings",
    "CoverageSettings",
    "PathSettings",
]
