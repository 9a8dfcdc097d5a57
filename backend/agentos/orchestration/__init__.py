"""
Orchestration package — interrupt protocol, scheduler and the task loop.
"""

from agentos.orchestration.agent_os import AgentOS, calculate_importance, context_key
from agentos.orchestration.hermes import (
    HermesProtocol, InterruptResult, MalformedCall, NoCall, ParsedCall, scan_tool_call,
    wrap_tool_response,
)
from agentos.orchestration.scheduler import CognitiveScheduler, default_reconcile

__all__ = [
    "AgentOS",
    "CognitiveScheduler",
    "HermesProtocol",
    "InterruptResult",
    "MalformedCall",
    "NoCall",
    "ParsedCall",
    "calculate_importance",
    "context_key",
    "default_reconcile",
    "scan_tool_call",
    "wrap_tool_response",
]
