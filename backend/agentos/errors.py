"""Error hierarchy for the kernel, the interrupt protocol and the task loop.

Only failures that abort a task are exceptions. A missing tool, a tool
timeout or a failing tool handler become ``{"error": ...}`` payloads that
are fed back to the model instead.
"""

from typing import Optional


class AgentOSError(Exception):
    def __init__(self, code: str, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.cause = cause


class GenerationFailure(AgentOSError):
    """The generation provider call failed (network, quota, bad response)."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None,
                 cause: Optional[Exception] = None, tcb_id: Optional[str] = None):
        super().__init__("GENERATION_FAILURE", message, cause)
        self.provider = provider
        self.status_code = status_code
        self.tcb_id = tcb_id  # set by the kernel for the step that failed


class MalformedToolCall(AgentOSError):
    """A tool-call block was present but its payload could not be parsed."""

    def __init__(self, raw: str, message: str, cause: Optional[Exception] = None):
        super().__init__("MALFORMED_TOOL_CALL", message, cause)
        self.raw = raw


class TaskFailed(AgentOSError):
    """A run_task invocation was aborted by a generation or protocol failure."""

    def __init__(self, session_id: str, message: str, cause: Optional[Exception] = None):
        super().__init__("TASK_FAILED", message, cause)
        self.session_id = session_id
