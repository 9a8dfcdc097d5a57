"""
AgentOS — agent-task orchestration kernel.

Runs a bounded reasoning/tool-call loop for concurrent agent sessions,
tracks per-step Task Control Blocks, resolves <tool_call> interrupts and
re-synchronizes sessions when their drift accumulates.

Quick start:
    from agentos import create_agent_os
    agent_os = create_agent_os()
    answer = await agent_os.run_task("agentA", "Summarize today's findings")
"""

from agentos.core import KernelState, ReasoningKernel, TaskControlBlock, TCBStatus
from agentos.errors import AgentOSError, GenerationFailure, MalformedToolCall, TaskFailed
from agentos.memory import MemoryPage, MemorySubsystem, SemanticMMU
from agentos.orchestration import AgentOS, CognitiveScheduler, HermesProtocol
from agentos.tools import Tool, ToolRegistry, default_tools, tool

__version__ = "0.1.0"


def create_agent_os(provider=None, memory: MemorySubsystem = None,
                    tools: ToolRegistry = None) -> AgentOS:
    """Build an AgentOS wired from the profile, with optional overrides."""
    if provider is None:
        from agentos.inference import get_provider
        provider = get_provider()
    memory = memory if memory is not None else SemanticMMU()
    kernel = ReasoningKernel(provider, KernelState())
    return AgentOS(kernel, memory, tools=tools)


__all__ = [
    "AgentOS",
    "AgentOSError",
    "CognitiveScheduler",
    "GenerationFailure",
    "HermesProtocol",
    "KernelState",
    "MalformedToolCall",
    "MemoryPage",
    "MemorySubsystem",
    "ReasoningKernel",
    "SemanticMMU",
    "TaskControlBlock",
    "TaskFailed",
    "TCBStatus",
    "Tool",
    "ToolRegistry",
    "create_agent_os",
    "default_tools",
    "tool",
]
