"""
Pipeline - 单元测试生成流程编排
"""

from .base_step import BaseStep
from .context import PipelineContext, UnitRun
from .orchestrator import Pipeline

__all__ = [
    "BaseStep",
    "PipelineContext",
    "UnitRun",
    "Pipeline",
]
