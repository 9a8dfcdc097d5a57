"""
Kernel state — Task Control Blocks and the shared drift counters.

KernelState is an explicit context object handed to the kernel and the
scheduler. Its asyncio.Lock owns the TCB mapping: creation, drift/status
commits, release/reap and the sync pulse all happen while holding it.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from agentos.config import DRIFT_PRECISION

logger = logging.getLogger(__name__)


class TCBStatus(Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    INTERRUPT = "interrupt"
    STANDBY = "standby"


@dataclass
class TaskControlBlock:
    id: str
    session_id: str
    focus: str
    active_tool: Optional[str] = None  # "pending" while a tool call is outstanding
    stack_depth: int = 0
    priority: int = 1
    drift: float = 0.0
    status: TCBStatus = TCBStatus.ACTIVE
    created_at: float = field(default_factory=time.monotonic)
    updated_at: float = field(default_factory=time.monotonic)

    @classmethod
    def create(cls, session_id: str, focus: str, priority: int = 1) -> "TaskControlBlock":
        return cls(
            id=f"tcb_{session_id}_{uuid.uuid4().hex[:12]}",
            session_id=session_id,
            focus=focus,
            priority=priority,
        )

    def touch(self):
        self.updated_at = time.monotonic()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "focus": self.focus[:200],
            "active_tool": self.active_tool,
            "stack_depth": self.stack_depth,
            "priority": self.priority,
            "drift": self.drift,
            "status": self.status.value,
        }


def add_drift(value: float, delta: float) -> float:
    """Add a drift increment, rounded so repeated steps compare exactly."""
    return round(value + delta, DRIFT_PRECISION)


class KernelState:
    """TCB table plus the per-session and global drift counters.

    ``global_drift`` is an incrementally maintained counter: every drift
    increment is added to it and only a sync pulse resets it. Releasing a
    TCB does not subtract its drift, so it can differ from drift_sum().
    """

    def __init__(self, lock: asyncio.Lock = None):
        self.tcbs: dict[str, TaskControlBlock] = {}
        self.session_drift: dict[str, float] = {}
        self.global_drift = 0.0
        self.lock = lock or asyncio.Lock()

    def get(self, tcb_id: str) -> Optional[TaskControlBlock]:
        return self.tcbs.get(tcb_id)

    def for_session(self, session_id: str) -> list[TaskControlBlock]:
        return [t for t in self.tcbs.values() if t.session_id == session_id]

    def drift_for(self, session_id: str) -> float:
        """Accumulated drift of a session since the last sync pulse."""
        return self.session_drift.get(session_id, 0.0)

    def drift_sum(self) -> float:
        """Drift recomputed from the resident TCBs."""
        return round(sum(t.drift for t in self.tcbs.values()), DRIFT_PRECISION)

    # ── Mutations (caller holds self.lock) ──

    def register(self, tcb: TaskControlBlock):
        self.tcbs[tcb.id] = tcb

    def apply_drift(self, tcb: TaskControlBlock, delta: float) -> float:
        """Apply one step's drift to the TCB, its session and the global counter.

        Returns the session's updated drift.
        """
        tcb.drift = add_drift(tcb.drift, delta)
        session_total = add_drift(self.drift_for(tcb.session_id), delta)
        self.session_drift[tcb.session_id] = session_total
        self.global_drift = add_drift(self.global_drift, delta)
        tcb.touch()
        return session_total

    def remove(self, tcb_id: str) -> Optional[TaskControlBlock]:
        return self.tcbs.pop(tcb_id, None)

    # ── Reaping ──

    async def release(self, tcb_id: str) -> bool:
        """Drop a TCB from the table. Returns False if it was already gone."""
        async with self.lock:
            return self.remove(tcb_id) is not None

    async def reap(self, ttl: float, now: float = None) -> list[str]:
        """Remove TCBs not updated within ``ttl`` seconds. Returns reaped ids."""
        now = now if now is not None else time.monotonic()
        async with self.lock:
            expired = [
                tcb_id for tcb_id, tcb in self.tcbs.items()
                if now - tcb.updated_at > ttl and tcb.status != TCBStatus.SUSPENDED
            ]
            for tcb_id in expired:
                self.remove(tcb_id)
        if expired:
            logger.info("[RK] Reaped %d idle TCBs (ttl=%ss)", len(expired), ttl)
        return expired

    def snapshot(self) -> dict:
        """Telemetry view of the table."""
        by_status: dict[str, int] = {}
        for tcb in self.tcbs.values():
            by_status[tcb.status.value] = by_status.get(tcb.status.value, 0) + 1
        return {
            "tcb_count": len(self.tcbs),
            "by_status": by_status,
            "global_drift": self.global_drift,
            "drift_sum": self.drift_sum(),
            "session_drift": dict(self.session_drift),
            "tcbs": [t.to_dict() for t in self.tcbs.values()],
        }
