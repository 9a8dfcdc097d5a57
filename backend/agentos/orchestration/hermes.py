"""
HermesProtocol — the Reasoning Interrupt Cycle for tool calls.

Generated text may carry one or more blocks of the form

    <tool_call>{"name": "search", "arguments": {"query": "..."}}</tool_call>

Only the first block is honored per pass; callers loop to pick up the rest.
The scanner reports one of three outcomes (ParsedCall, NoCall,
MalformedCall). A parsed call is dispatched to the matching tool, bounded
by that tool's timeout, and the result is wrapped as

    <tool_response>{...}</tool_response>

for re-injection into the kernel.
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from agentos.config import (
    TOOL_CALL_CLOSE, TOOL_CALL_OPEN, TOOL_RESPONSE_CLOSE, TOOL_RESPONSE_OPEN,
)
from agentos.errors import MalformedToolCall
from agentos.tools import Tool, ToolRegistry

logger = logging.getLogger(__name__)

_TOOL_CALL_RE = re.compile(
    re.escape(TOOL_CALL_OPEN) + r"(.*?)" + re.escape(TOOL_CALL_CLOSE),
    re.DOTALL,
)


class ToolCallPayload(BaseModel):
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


# ── Scan outcomes ──

@dataclass
class ParsedCall:
    name: str
    arguments: dict
    raw: str


@dataclass
class NoCall:
    pass


@dataclass
class MalformedCall:
    raw: str
    error: str


ToolCallScan = Union[ParsedCall, NoCall, MalformedCall]


def scan_tool_call(text: str) -> ToolCallScan:
    """Find and parse the first <tool_call> block in ``text``."""
    match = _TOOL_CALL_RE.search(text or "")
    if not match:
        return NoCall()
    raw = match.group(1)
    try:
        payload = ToolCallPayload.model_validate_json(raw.strip())
    except ValidationError as e:
        return MalformedCall(raw=raw, error=str(e))
    return ParsedCall(name=payload.name, arguments=payload.arguments, raw=raw)


def wrap_tool_response(payload: Any) -> str:
    return f"{TOOL_RESPONSE_OPEN}{json.dumps(payload, default=str)}{TOOL_RESPONSE_CLOSE}"


@dataclass
class InterruptResult:
    call: ParsedCall
    payload: Any
    resolved: bool
    response: str = field(default="")


class HermesProtocol:
    """Detects, dispatches and packages one tool-call interrupt per pass."""

    async def process_interrupt(self, text: str, tools) -> Optional[str]:
        """Resolve the first tool call in ``text``.

        Returns the wrapped <tool_response> text, or None when ``text``
        contains no complete tool-call block.

        Raises:
            MalformedToolCall: the block's payload is not a valid call.
        """
        result = await self.resolve(text, tools)
        return result.response if result else None

    async def resolve(self, text: str, tools) -> Optional[InterruptResult]:
        """Like process_interrupt, but returns the structured outcome."""
        scan = scan_tool_call(text)
        if isinstance(scan, NoCall):
            return None
        if isinstance(scan, MalformedCall):
            logger.error("[RIC] Malformed tool call: %s", scan.error[:200])
            raise MalformedToolCall(scan.raw, f"Malformed tool call: {scan.error}")

        logger.info("[RIC] SIG_TOOL_INVOKE detected: %s", scan.name)
        registry = ToolRegistry.coerce(tools)
        tool = registry.get(scan.name)
        if tool is None:
            logger.warning("[RIC] Tool not found: %s (available: %s)", scan.name, registry.names())
            payload, resolved = {"error": "Tool not found"}, False
        else:
            payload, resolved = await self._execute_tool(tool, scan.arguments)

        return InterruptResult(
            call=scan,
            payload=payload,
            resolved=resolved,
            response=wrap_tool_response(payload),
        )

    async def _execute_tool(self, tool: Tool, arguments: dict) -> tuple[Any, bool]:
        """Run a tool under its timeout. Failures become error payloads."""
        timeout = tool.effective_timeout
        try:
            result = await asyncio.wait_for(tool.execute(arguments), timeout=timeout)
            return result, True
        except asyncio.TimeoutError:
            logger.warning("[RIC] Tool %s timed out after %ss", tool.name, timeout)
            return {"error": "Tool timed out", "tool": tool.name, "timeout": timeout}, False
        except Exception as e:
            logger.error("[RIC] Tool %s failed: %s", tool.name, e)
            return {"error": f"Tool execution failed: {e}", "tool": tool.name}, False
