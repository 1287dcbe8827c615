"""
Sandbox - isolated compile / run / coverage execution.
"""

from .runner import SandboxRunner

__all__ = ["SandboxRunner"]
