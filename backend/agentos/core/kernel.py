"""
ReasoningKernel — runs exactly one generation step per call.

Each step gets its own Task Control Block registered in the shared
KernelState. The generation call itself happens outside the state lock;
TCB creation and the drift/status commit happen under it, so a sync pulse
never observes a half-applied step.
"""

import logging
from typing import Optional

from agentos.config import DRIFT_INCREMENT, DRIFT_THRESHOLD, TOOL_CALL_OPEN
from agentos.core.state import KernelState, TaskControlBlock, TCBStatus
from agentos.errors import GenerationFailure
from agentos.inference.base import GenerationProvider
from agentos.prompts import build_kernel_prompt

logger = logging.getLogger(__name__)


def has_tool_marker(text: str) -> bool:
    """True when generated text carries a tool-call marker."""
    return bool(text) and TOOL_CALL_OPEN in text


def drift_exceeded(drift: float, threshold: float = DRIFT_THRESHOLD) -> bool:
    return drift >= threshold


class ReasoningKernel:
    """Executes single generation steps and tracks them as TCBs."""

    def __init__(self, provider: GenerationProvider, state: KernelState = None,
                 drift_increment: float = DRIFT_INCREMENT,
                 drift_threshold: float = DRIFT_THRESHOLD):
        self.provider = provider
        self.state = state or KernelState()
        self.drift_increment = drift_increment
        self.drift_threshold = drift_threshold

    async def execute(self, session_id: str, query: str, context: str,
                      tool_descriptions: str = "") -> str:
        """Run one step for ``session_id`` and return the raw output text."""
        _, text = await self.step(session_id, query, context, tool_descriptions)
        return text

    async def step(self, session_id: str, query: str, context: str,
                   tool_descriptions: str = "") -> tuple[TaskControlBlock, str]:
        """Run one step and return the step's TCB along with the output text.

        Raises:
            GenerationFailure: the provider call failed. The TCB stays
                registered in the state it had before the call, and its id
                is carried on the exception as ``tcb_id``.
        """
        tcb = TaskControlBlock.create(session_id, query)
        async with self.state.lock:
            self.state.register(tcb)

        system_prompt = build_kernel_prompt(tcb.id, tool_descriptions)
        try:
            text = await self.provider.generate(system_prompt, context, query)
        except GenerationFailure as e:
            logger.error("[RK] Generation failed for %s", tcb.id)
            e.tcb_id = tcb.id
            raise
        except Exception as e:
            logger.error("[RK] Generation failed for %s: %s", tcb.id, e)
            raise GenerationFailure(
                getattr(self.provider, "name", type(self.provider).__name__),
                f"Generation provider error: {e}",
                cause=e,
                tcb_id=tcb.id,
            ) from e
        text = text or ""

        async with self.state.lock:
            if self.state.get(tcb.id) is None:
                # Released or reaped while the provider call was in flight
                logger.warning("[RK] %s left the table mid-step; result not committed", tcb.id)
                return tcb, text

            if has_tool_marker(text):
                tcb.active_tool = "pending"
                tcb.status = TCBStatus.INTERRUPT
                logger.info("[RK] Interrupt detected for %s: Tool Call Pending.", tcb.id)

            session_drift = self.state.apply_drift(tcb, self.drift_increment)
            if drift_exceeded(session_drift, self.drift_threshold):
                tcb.status = TCBStatus.INTERRUPT
                logger.warning("[RK] SIG_SYNC_DRIFT triggered for %s (session drift %.2f)",
                               tcb.id, session_drift)

        return tcb, text

    async def resolve(self, tcb_id: str) -> bool:
        """Mark a TCB's tool interrupt as consumed: INTERRUPT -> ACTIVE."""
        async with self.state.lock:
            tcb = self.state.get(tcb_id)
            if tcb is None or tcb.status != TCBStatus.INTERRUPT:
                return False
            tcb.status = TCBStatus.ACTIVE
            tcb.active_tool = None
            tcb.touch()
            return True

    async def release(self, tcb_id: str) -> bool:
        return await self.state.release(tcb_id)

    async def reap_expired(self, ttl: float) -> list[str]:
        return await self.state.reap(ttl)

    def get_tcb(self, tcb_id: str) -> Optional[TaskControlBlock]:
        return self.state.get(tcb_id)

    def get_state(self) -> KernelState:
        return self.state
