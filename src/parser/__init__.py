"""
Source discovery package.
"""

from .base import BaseDiscovery
from .cpp_discovery import CppDiscovery, companion_path, infer_declared_symbols

__all__ = [
    "BaseDiscovery",
    "CppDiscovery",
    "companion_path",
    "infer_declared_symbols",
]
