"""
Agent Tools — capabilities the kernel can invoke through <tool_call> blocks.

A Tool pairs a name with a handler taking the call's ``arguments`` dict.
Handlers may be plain functions or coroutines; plain functions run in a
worker thread so a blocking handler never stalls the event loop.

Built-in tools:
  - search: web search through a SearXNG endpoint
  - memory_recall: look a page up in the memory subsystem
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Optional

import httpx

from agentos.config import SEARCH_ENDPOINT, SEARCH_MAX_RESULTS, TOOL_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass
class Tool:
    """A named capability the kernel can call.

    Plain-function handlers run in the default thread pool. A timeout stops
    the caller from waiting, but the worker thread cannot be cancelled and
    keeps running until the handler returns, so blocking handlers should
    bound their own I/O (e.g. pass a timeout to the client they use).
    Prefer coroutine handlers for anything that may hang; those are
    cancelled when the timeout fires.
    """

    name: str
    handler: Callable[[dict], Any]
    description: str = ""
    timeout: Optional[float] = None  # None -> TOOL_TIMEOUT

    async def execute(self, arguments: dict) -> Any:
        """Run the handler once and return its raw result."""
        if inspect.iscoroutinefunction(self.handler):
            return await self.handler(arguments)
        result = await asyncio.to_thread(self.handler, arguments)
        if inspect.isawaitable(result):
            result = await result
        return result

    @property
    def effective_timeout(self) -> float:
        return self.timeout if self.timeout is not None else TOOL_TIMEOUT


class ToolRegistry:
    """Tools keyed by name. The first registration of a name wins."""

    def __init__(self, tools: Iterable[Tool] = ()):
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    @classmethod
    def coerce(cls, tools) -> "ToolRegistry":
        """Accept a registry, an iterable of tools, or None."""
        if isinstance(tools, ToolRegistry):
            return tools
        return cls(tools or ())

    def register(self, tool: Tool) -> bool:
        """Register a tool. Returns False if the name is already taken."""
        if tool.name in self._tools:
            logger.debug("Tool %s already registered — keeping first", tool.name)
            return False
        self._tools[tool.name] = tool
        return True

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools.keys())

    def describe(self) -> str:
        """Build human-readable tool list for the kernel prompt."""
        lines = []
        for tool in self._tools.values():
            doc = (tool.description or "").strip().split("\n")[0]
            lines.append(f"- {tool.name}: {doc}" if doc else f"- {tool.name}")
        return "\n".join(lines)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(list(self._tools.values()))

    def __len__(self) -> int:
        return len(self._tools)


def tool(name: str = None, description: str = None, timeout: float = None):
    """Decorator turning a handler function into a Tool."""
    def wrap(fn):
        return Tool(
            name=name or fn.__name__,
            handler=fn,
            description=description if description is not None else (fn.__doc__ or "").strip(),
            timeout=timeout,
        )
    return wrap


# ── Built-in Tools ──

def make_search_tool(endpoint: str = SEARCH_ENDPOINT, max_results: int = SEARCH_MAX_RESULTS,
                     transport: httpx.AsyncBaseTransport = None) -> Tool:
    async def search(arguments: dict) -> dict:
        """Search the web for real-time information."""
        query = str(arguments.get("query", "")).strip()
        if not query:
            return {"error": "Search failed: empty query"}
        try:
            async with httpx.AsyncClient(timeout=15, transport=transport) as client:
                resp = await client.post(endpoint, data={"q": query, "format": "json"})
                resp.raise_for_status()
                data = resp.json()
        except Exception as e:
            return {"error": f"Search failed: {e}"}
        results = data.get("results", [])
        return {
            "text": f"Found {len(results)} results",
            "sources": [
                {
                    "title": r.get("title", ""),
                    "url": r.get("url", ""),
                    "snippet": (r.get("content") or "")[:300],
                }
                for r in results[:max_results]
            ],
        }

    return Tool(name="search", handler=search, description=search.__doc__)


def make_memory_recall_tool(memory) -> Tool:
    async def memory_recall(arguments: dict) -> dict:
        """Deep search into sovereign memory for specific facts."""
        key = str(arguments.get("query", "")).strip()
        if not key:
            return {"error": "memory_recall requires a query"}
        page = await memory.recall(key)
        if page is None:
            return {"result": f'No stored context for "{key}".', "confidence": 0.0}
        return {
            "result": page.content,
            "confidence": round(min(page.importance, 100) / 100, 2),
        }

    return Tool(name="memory_recall", handler=memory_recall, description=memory_recall.__doc__)


def default_tools(memory=None) -> ToolRegistry:
    """Registry with the built-in tools. memory_recall needs a memory subsystem."""
    registry = ToolRegistry([make_search_tool()])
    if memory is not None:
        registry.register(make_memory_recall_tool(memory))
    return registry
