"""
Core package — the reasoning kernel and the state it owns.
"""

from agentos.core.kernel import ReasoningKernel, drift_exceeded, has_tool_marker
from agentos.core.state import KernelState, TaskControlBlock, TCBStatus

__all__ = [
    "KernelState",
    "ReasoningKernel",
    "TaskControlBlock",
    "TCBStatus",
    "drift_exceeded",
    "has_tool_marker",
]
