"""
生成引擎模块 - 单元测试生成逻辑

核心组件：
- prompt_builder: 提示词渲染
- llm_client: Ollama 调用与重试矩阵
- coverage_gate: gcov 报告解析与阈值判定
- errors: 异常层级
"""

from .coverage_gate import CoverageGate, parse_coverage_report
from .llm_client import GenerationClient
from .prompt_builder import PromptBuilder

__all__ = [
    "CoverageGate",
    "parse_coverage_report",
    "GenerationClient",
    "PromptBuilder",
]
