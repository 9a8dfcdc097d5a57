"""
CognitiveScheduler — priority ordering and Cognitive Sync Pulses.

A sync pulse realigns every session after drift has accumulated:
  1. suspend every active TCB
  2. reconcile a shared context (pluggable hook)
  3. reset every TCB's drift, clear pending tool markers and resume it
  4. reset the global drift counter

Steps 1-3 run under the kernel state lock, so no in-flight kernel step can
commit to a TCB while it is suspended.
"""

import inspect
import logging
from typing import Awaitable, Callable, Iterable, Optional, Union

from agentos.config import DRIFT_THRESHOLD, SYNC_PLACEHOLDER
from agentos.core.kernel import drift_exceeded
from agentos.core.state import KernelState, TaskControlBlock, TCBStatus

logger = logging.getLogger(__name__)

ReconcileHook = Callable[[list[TaskControlBlock]], Union[str, Awaitable[str]]]


def default_reconcile(tcbs: list[TaskControlBlock]) -> str:
    return SYNC_PLACEHOLDER


class CognitiveScheduler:
    """Orders TCBs and runs sync pulses over a KernelState."""

    def __init__(self, reconcile: ReconcileHook = None, drift_threshold: float = DRIFT_THRESHOLD):
        self._reconcile = reconcile or default_reconcile
        self.drift_threshold = drift_threshold
        self.pulse_count = 0
        self.last_context: Optional[str] = None

    def schedule(self, tcbs: Union[dict[str, TaskControlBlock], Iterable[TaskControlBlock]]) -> list[TaskControlBlock]:
        """TCBs by priority, highest first. Ties keep insertion order."""
        items = tcbs.values() if isinstance(tcbs, dict) else tcbs
        return sorted(items, key=lambda t: t.priority, reverse=True)

    def needs_sync(self, state: KernelState) -> bool:
        return drift_exceeded(state.global_drift, self.drift_threshold)

    async def sync_pulse(self, state: KernelState) -> str:
        """Suspend, reconcile, reset drift, resume. Returns the reconciled context."""
        logger.info("[CSP] Triggering Multi-Agent Cognitive Sync Pulse...")
        async with state.lock:
            tcbs = list(state.tcbs.values())
            for tcb in tcbs:
                if tcb.status == TCBStatus.ACTIVE:
                    tcb.status = TCBStatus.SUSPENDED

            try:
                context = self._reconcile(tcbs)
                if inspect.isawaitable(context):
                    context = await context
            finally:
                # Never leave TCBs suspended, even if the hook fails
                for tcb in tcbs:
                    tcb.drift = 0.0
                    if tcb.status != TCBStatus.STANDBY:
                        tcb.status = TCBStatus.ACTIVE
                        tcb.active_tool = None
                    tcb.touch()
                state.session_drift.clear()
                state.global_drift = 0.0

        self.pulse_count += 1
        self.last_context = context
        logger.info("[CSP] Perception Alignment Complete. Resumed %d TCBs.", len(tcbs))
        return context
