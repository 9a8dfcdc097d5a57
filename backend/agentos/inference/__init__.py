"""
Inference package — generation provider abstraction layer.

Provides adapters for LLM inference servers and a factory that builds the
one configured in profile.yaml.

Quick start:
    from agentos.inference import get_provider
    provider = get_provider()
    text = await provider.generate(system_prompt, context, query)
"""

from agentos.inference.base import GenerationProvider
from agentos.inference.ollama import OllamaProvider
from agentos.inference.openai_compat import OpenAICompatProvider

_PROVIDER_TYPES = {
    "openai": OpenAICompatProvider,
    "ollama": OllamaProvider,
}


def get_provider(provider_type: str = None) -> GenerationProvider:
    """Build the generation provider described by the profile."""
    from agentos.config import (
        API_BASE, API_KEY, GENERATION_TIMEOUT, INFERENCE_TYPE, MAX_TOKENS, MODEL_ID, TEMPERATURE,
    )
    key = provider_type or INFERENCE_TYPE
    cls = _PROVIDER_TYPES.get(key)
    if cls is None:
        raise ValueError(f"Unknown inference backend type: {key}")
    return cls(
        base_url=API_BASE,
        model_id=MODEL_ID,
        api_key=API_KEY,
        max_tokens=MAX_TOKENS,
        temperature=TEMPERATURE,
        default_timeout=GENERATION_TIMEOUT,
    )


__all__ = [
    "GenerationProvider",
    "OpenAICompatProvider",
    "OllamaProvider",
    "get_provider",
]
