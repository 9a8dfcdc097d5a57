"""
Test fixtures for the AgentOS kernel test suite.
"""

import os
import sys
from pathlib import Path

import pytest

# Add backend to path
BACKEND_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BACKEND_DIR))

# Set up a known profile before importing anything that reads config
os.environ["AGENTOS_PROFILE_PATH"] = str(BACKEND_DIR.parent / "profile.yaml.example")


TOOL_CALL_TEXT = '<tool_call>{"name":"search","arguments":{"query":"x"}}</tool_call>'


class StubProvider:
    """Scripted generation provider.

    Each generate() call consumes the next scripted item; the last item is
    repeated once the script runs out. Exception instances are raised.
    """

    name = "stub"

    def __init__(self, *responses):
        self.responses = list(responses) or [""]
        self.calls: list[dict] = []

    async def generate(self, system_prompt: str, context: str, query: str) -> str:
        self.calls.append({"system_prompt": system_prompt, "context": context, "query": query})
        idx = min(len(self.calls) - 1, len(self.responses) - 1)
        item = self.responses[idx]
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def stub_provider():
    """Factory for scripted providers."""
    return StubProvider


@pytest.fixture
def tool_call_text():
    return TOOL_CALL_TEXT


@pytest.fixture
def make_tcbs():
    """Build a KernelState populated with TCBs of the given priorities."""
    from agentos.core.state import KernelState, TaskControlBlock

    def _make(priorities, session_id="agentA"):
        state = KernelState()
        for i, priority in enumerate(priorities):
            tcb = TaskControlBlock(id=f"tcb_{i}_p{priority}", session_id=session_id,
                                   focus=f"query {i}", priority=priority)
            state.register(tcb)
        return state

    return _make
