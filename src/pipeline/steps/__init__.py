"""
Pipeline step modules, in execution order.
"""
from .pairing import PairingStep
from .generation import GenerationStep
from .sandbox_run import SandboxStep
from .coverage_check import CoverageStep
from .persist import PersistStep

STEP_CLASSES = (PairingStep, GenerationStep, SandboxStep, CoverageStep, PersistStep)

__all__ = [
    "PairingStep",
    "GenerationStep",
    "SandboxStep",
    "CoverageStep",
    "PersistStep",
    "STEP_CLASSES",
]
