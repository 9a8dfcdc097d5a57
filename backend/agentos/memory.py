"""
Semantic MMU — tiered in-process memory for orchestration results.

Pages live in one of three tiers:
  - L1: small hot cache consulted first
  - L2: semantic RAM, receives pages evicted from L1
  - L3: cold archive, receives pages evicted from L2 (optionally mirrored
    to an external store through an async archiver callable)

Eviction always picks the lowest-importance page of the full tier. Nothing
is persisted to disk.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from agentos.config import L1_LIMIT, L2_LIMIT

logger = logging.getLogger(__name__)


@dataclass
class MemoryPage:
    id: str
    content: str
    importance: float = 0.0  # 0-100
    last_accessed: float = field(default_factory=time.time)
    tags: set[str] = field(default_factory=set)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "importance": self.importance,
            "last_accessed": self.last_accessed,
            "tags": sorted(self.tags),
        }


class MemorySubsystem(ABC):
    """Contract the orchestrator relies on for recall and archival."""

    @abstractmethod
    async def recall(self, key: str) -> Optional[MemoryPage]:
        ...

    @abstractmethod
    async def manage_memory(self, page: MemoryPage) -> None:
        ...

    @abstractmethod
    def get_telemetry(self) -> dict:
        ...


class SemanticMMU(MemorySubsystem):
    """Importance-ranked L1/L2/L3 paging."""

    def __init__(self, l1_limit: int = L1_LIMIT, l2_limit: int = L2_LIMIT,
                 archiver: Callable[[MemoryPage], Awaitable[None]] = None):
        self.l1_limit = l1_limit
        self.l2_limit = l2_limit
        self._archiver = archiver
        self.l1: list[MemoryPage] = []
        self.l2: list[MemoryPage] = []
        self.l3: dict[str, MemoryPage] = {}
        self.page_table: dict[str, str] = {}  # page_id -> "L1" | "L2" | "L3"
        self.page_faults = 0
        self._lock = asyncio.Lock()

    async def manage_memory(self, page: MemoryPage) -> None:
        """Insert a page into L1, paging out the least important page if full."""
        async with self._lock:
            await self._insert_l1(page)

    async def recall(self, key: str) -> Optional[MemoryPage]:
        """Look a page up by id. L2/L3 hits are page faults and swap back into L1."""
        async with self._lock:
            location = self.page_table.get(key)
            if location is None:
                return None
            if location == "L1":
                page = next((p for p in self.l1 if p.id == key), None)
                if page:
                    page.last_accessed = time.time()
                return page

            self.page_faults += 1
            if location == "L2":
                page = self._take(self.l2, key)
            else:
                page = self.l3.pop(key, None)
            if page is None:
                self.page_table.pop(key, None)
                return None
            logger.info("[S-MMU] Page fault on %s (%s) — swapping into L1", key, location)
            page.last_accessed = time.time()
            await self._insert_l1(page)
            return page

    def get_telemetry(self) -> dict:
        return {
            "l1Size": len(self.l1),
            "l2Size": len(self.l2),
            "l3Size": len(self.l3),
            "pageFaults": self.page_faults,
        }

    # ── Internals (caller holds self._lock) ──

    async def _insert_l1(self, page: MemoryPage):
        self._discard(page.id)
        if len(self.l1) >= self.l1_limit:
            victim = self.l1.pop(self._find_victim(self.l1))
            await self._archive_to_l2(victim)
        self.l1.append(page)
        self.page_table[page.id] = "L1"

    async def _archive_to_l2(self, page: MemoryPage):
        if len(self.l2) >= self.l2_limit:
            victim = self.l2.pop(self._find_victim(self.l2))
            await self._archive_to_l3(victim)
        self.l2.append(page)
        self.page_table[page.id] = "L2"
        logger.info("[S-MMU] Paged out %s to L2 RAM", page.id)

    async def _archive_to_l3(self, page: MemoryPage):
        logger.info("[S-MMU] Archiving %s to L3", page.id)
        self.l3[page.id] = page
        self.page_table[page.id] = "L3"
        if self._archiver:
            try:
                await self._archiver(page)
            except Exception as e:
                logger.warning("[S-MMU] L3 archiver failed for %s: %s", page.id, e)

    def _discard(self, page_id: str):
        """Drop any resident copy of a page before it is re-inserted."""
        location = self.page_table.pop(page_id, None)
        if location == "L1":
            self._take(self.l1, page_id)
        elif location == "L2":
            self._take(self.l2, page_id)
        elif location == "L3":
            self.l3.pop(page_id, None)

    @staticmethod
    def _take(tier: list[MemoryPage], page_id: str) -> Optional[MemoryPage]:
        for idx, p in enumerate(tier):
            if p.id == page_id:
                return tier.pop(idx)
        return None

    @staticmethod
    def _find_victim(tier: list[MemoryPage]) -> int:
        """Index of the lowest-importance page; first one wins on ties."""
        victim_idx = 0
        min_score = float("inf")
        for idx, page in enumerate(tier):
            if page.importance < min_score:
                min_score = page.importance
                victim_idx = idx
        return victim_idx
