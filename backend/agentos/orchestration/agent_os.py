"""
AgentOS — the end-to-end task loop.

run_task drives one session's request:
  recall → kernel step → bounded Reasoning Interrupt Cycle → archival → sync

Generation and protocol failures abort the task. Archival and the sync
pulse are best-effort and never fail a task that already has a response.
"""

import logging
import time
from typing import Optional

from agentos.config import (
    CONTEXT_KEY_PREFIX, DRIFT_THRESHOLD, IMPORTANCE_KEYWORD, IMPORTANCE_KEYWORD_BONUS,
    IMPORTANCE_MAX, MAX_INTERRUPT_PASSES, NO_CONTEXT_PLACEHOLDER, RELEASE_ON_COMPLETE,
    TCB_TTL_SECONDS, TOOL_RESULT_PREFIX,
)
from agentos.core.kernel import ReasoningKernel, has_tool_marker
from agentos.core.state import TCBStatus
from agentos.errors import GenerationFailure, MalformedToolCall, TaskFailed
from agentos.memory import MemoryPage, MemorySubsystem
from agentos.orchestration.hermes import HermesProtocol
from agentos.orchestration.scheduler import CognitiveScheduler
from agentos.tools import ToolRegistry, default_tools

logger = logging.getLogger(__name__)


def calculate_importance(content: str, keyword: str = IMPORTANCE_KEYWORD) -> float:
    """Length-and-keyword heuristic, capped at 100."""
    score = len(content) / 100 + (IMPORTANCE_KEYWORD_BONUS if keyword and keyword in content else 0)
    return min(IMPORTANCE_MAX, score)


def context_key(session_id: str) -> str:
    return f"{CONTEXT_KEY_PREFIX}{session_id}"


class AgentOS:
    """Wires kernel, interrupt protocol, scheduler and memory into run_task."""

    def __init__(self, kernel: ReasoningKernel, memory: MemorySubsystem,
                 scheduler: CognitiveScheduler = None, hermes: HermesProtocol = None,
                 tools: ToolRegistry = None,
                 max_passes: int = MAX_INTERRUPT_PASSES,
                 drift_threshold: float = DRIFT_THRESHOLD,
                 release_on_complete: bool = RELEASE_ON_COMPLETE,
                 tcb_ttl: float = TCB_TTL_SECONDS):
        self.kernel = kernel
        self.state = kernel.get_state()
        self.memory = memory
        self.scheduler = scheduler or CognitiveScheduler(drift_threshold=drift_threshold)
        self.hermes = hermes or HermesProtocol()
        self.tools = tools if tools is not None else default_tools(memory)
        self.max_passes = max_passes
        self.drift_threshold = drift_threshold
        self.release_on_complete = release_on_complete
        self.tcb_ttl = tcb_ttl
        self.tasks_completed = 0
        self.tasks_failed = 0

    async def run_task(self, session_id: str, query: str, tools=None) -> str:
        """Run one sovereign task for ``session_id`` and return the final response.

        Raises:
            TaskFailed: a generation step failed or the model emitted a
                malformed tool call.
        """
        logger.info("[AgentOS] Initializing Sovereign Reasoning for %s...", session_id)
        await self.reap()
        registry = ToolRegistry.coerce(tools if tools is not None else self.tools)
        tool_descriptions = registry.describe()

        context = await self._recall_context(session_id)
        tcb_ids: list[str] = []

        try:
            tcb, response = await self.kernel.step(session_id, query, context, tool_descriptions)
            tcb_ids.append(tcb.id)

            passes = 0
            while has_tool_marker(response) and passes < self.max_passes:
                logger.info("[AgentOS] RIC: Tool Interrupt detected. Pass %d", passes + 1)
                result = await self.hermes.process_interrupt(response, registry)
                if result is None:
                    break

                logger.info("[AgentOS] RIC: Tool Result Aligned. Re-entering RK...")
                await self.kernel.resolve(tcb.id)
                tcb, response = await self.kernel.step(
                    session_id,
                    f"{TOOL_RESULT_PREFIX}{result}",
                    f"{context}\n{response}",
                    tool_descriptions,
                )
                tcb_ids.append(tcb.id)
                passes += 1
        except (GenerationFailure, MalformedToolCall) as e:
            if isinstance(e, GenerationFailure) and e.tcb_id and e.tcb_id not in tcb_ids:
                tcb_ids.append(e.tcb_id)
            self.tasks_failed += 1
            logger.error("[AgentOS] Task for %s aborted: %s", session_id, e)
            raise TaskFailed(session_id, f"Task aborted: {e}", cause=e) from e
        else:
            await self._archive(session_id, response)
            await self._maybe_sync()
        finally:
            # Failed and cancelled tasks hand back their TCBs too
            await self._finish(tcb_ids)

        self.tasks_completed += 1
        return response

    # ── Steps ──

    async def _recall_context(self, session_id: str) -> str:
        try:
            page = await self.memory.recall(context_key(session_id))
        except Exception as e:
            logger.warning("[AgentOS] Memory recall failed for %s: %s", session_id, e)
            return NO_CONTEXT_PLACEHOLDER
        return page.content if page else NO_CONTEXT_PLACEHOLDER

    def build_page(self, session_id: str, response: str) -> MemoryPage:
        return MemoryPage(
            id=context_key(session_id),
            content=response or "",
            importance=calculate_importance(response or ""),
            last_accessed=time.time(),
            tags={session_id, "synthesis"},
        )

    async def _archive(self, session_id: str, response: str):
        try:
            await self.memory.manage_memory(self.build_page(session_id, response))
        except Exception as e:
            logger.warning("[AgentOS] Memory archival failed for %s: %s", session_id, e)

    async def _maybe_sync(self) -> Optional[str]:
        if not self.scheduler.needs_sync(self.state):
            return None
        try:
            return await self.scheduler.sync_pulse(self.state)
        except Exception as e:
            logger.warning("[AgentOS] Sync pulse failed: %s", e)
            return None

    async def _finish(self, tcb_ids: list[str]):
        """Release the task's TCBs, or park them in standby for the TTL sweep."""
        if self.release_on_complete:
            for tcb_id in tcb_ids:
                await self.kernel.release(tcb_id)
            return
        async with self.state.lock:
            for tcb_id in tcb_ids:
                tcb = self.state.get(tcb_id)
                if tcb is not None:
                    tcb.status = TCBStatus.STANDBY
                    tcb.touch()

    # ── Maintenance ──

    async def reap(self) -> list[str]:
        """Drop TCBs idle for longer than the configured TTL."""
        return await self.kernel.reap_expired(self.tcb_ttl)

    def get_telemetry(self) -> dict:
        try:
            mmu = self.memory.get_telemetry()
        except Exception as e:
            logger.warning("[AgentOS] Memory telemetry unavailable: %s", e)
            mmu = {}
        return {
            "kernel": self.state.snapshot(),
            "mmu": mmu,
            "scheduler": {
                "pulse_count": self.scheduler.pulse_count,
                "last_context": self.scheduler.last_context,
            },
            "tasks": {
                "completed": self.tasks_completed,
                "failed": self.tasks_failed,
            },
        }
