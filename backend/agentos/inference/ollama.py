"""
Ollama generation adapter.

Wraps Ollama's native /api/chat endpoint (non-streaming). Ollama takes the
same role/content messages but puts sampling settings under ``options``.
"""

import logging

from agentos.inference.base import GenerationProvider

logger = logging.getLogger(__name__)


class OllamaProvider(GenerationProvider):
    """Provider adapter for a local Ollama server."""

    name = "ollama"

    def __init__(self, base_url: str = "http://localhost:11434", **kwargs):
        super().__init__(base_url, **kwargs)

    async def _complete(self, messages: list[dict]) -> str:
        payload = {
            "model": self.model_id,
            "messages": messages,
            "stream": False,
            "options": {
                "num_predict": self.max_tokens,
                "temperature": self.temperature,
            },
        }
        async with self._client() as client:
            resp = await client.post(f"{self.base_url}/api/chat", json=payload)
            resp.raise_for_status()
            data = resp.json()
        if data.get("error"):
            raise ValueError(data["error"])
        return data["message"].get("content") or ""
