"""
Abstract base class for all generation provider adapters.

Every adapter (OpenAI-compatible, Ollama) implements this interface so the
ReasoningKernel can treat them interchangeably. The kernel only ever needs a
single non-streaming completion per step.
"""

import logging
from abc import ABC, abstractmethod

import httpx

from agentos.errors import GenerationFailure

logger = logging.getLogger(__name__)


class GenerationProvider(ABC):
    """Abstract generation provider interface.

    Concrete adapters implement the HTTP-specific details for their server
    type while exposing ``generate(system_prompt, context, query) -> str``.
    Any failure must surface as ``GenerationFailure``.
    """

    name = "base"

    def __init__(self, base_url: str, model_id: str = "", api_key: str = "",
                 max_tokens: int = 2048, temperature: float = 0.7,
                 default_timeout: float = 120, transport: httpx.AsyncBaseTransport = None):
        self.base_url = base_url.rstrip("/")
        self.model_id = model_id
        self.api_key = api_key
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.default_timeout = default_timeout
        self._transport = transport

    @staticmethod
    def build_messages(system_prompt: str, context: str, query: str) -> list[dict]:
        """Frame a kernel step as a system + user message pair."""
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": f"CONTEXT: {context}\n\nQUERY: {query}"},
        ]

    def _client(self) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else None
        return httpx.AsyncClient(
            timeout=self.default_timeout,
            headers=headers,
            transport=self._transport,
        )

    async def generate(self, system_prompt: str, context: str, query: str) -> str:
        """Run one completion and return the output text.

        Raises:
            GenerationFailure: on transport errors, non-2xx responses, or a
                response body that does not carry any text.
        """
        messages = self.build_messages(system_prompt, context, query)
        try:
            return await self._complete(messages)
        except GenerationFailure:
            raise
        except httpx.HTTPStatusError as e:
            raise GenerationFailure(
                self.name,
                f"{self.name} returned {e.response.status_code}: {e.response.text[:200]}",
                status_code=e.response.status_code,
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise GenerationFailure(
                self.name, f"Cannot reach {self.name} backend at {self.base_url}: {e}", cause=e,
            ) from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise GenerationFailure(self.name, f"Unexpected response shape: {e}", cause=e) from e

    @abstractmethod
    async def _complete(self, messages: list[dict]) -> str:
        """Send messages to the backend and return the assistant text."""
        ...
