"""
OpenAI-compatible generation adapter.

Covers any server that implements the OpenAI chat completions contract:
  - LM Studio
  - vLLM
  - llama.cpp server
  - hosted OpenAI-compatible APIs (API key sent as a bearer token)
"""

import logging

from agentos.inference.base import GenerationProvider

logger = logging.getLogger(__name__)


class OpenAICompatProvider(GenerationProvider):
    """Provider adapter for /v1/chat/completions servers."""

    name = "openai"

    async def _complete(self, messages: list[dict]) -> str:
        payload = {
            "model": self.model_id,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        async with self._client() as client:
            resp = await client.post(f"{self.base_url}/v1/chat/completions", json=payload)
            resp.raise_for_status()
            data = resp.json()
        return data["choices"][0]["message"].get("content") or ""
