"""
Tests for the generation provider adapters.
Uses httpx.MockTransport in place of a live inference server.
"""

import json

import httpx
import pytest


def _transport(handler):
    requests = []

    def _handle(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return httpx.MockTransport(_handle), requests


class TestOpenAICompat:

    @pytest.mark.asyncio
    async def test_returns_message_content(self):
        """The assistant content is returned and the request carries model, auth and messages."""
        from agentos.inference import OpenAICompatProvider

        transport, requests = _transport(lambda r: httpx.Response(
            200, json={"choices": [{"message": {"role": "assistant", "content": "hello"}}]}
        ))
        provider = OpenAICompatProvider("http://llm.local/", model_id="m1", api_key="sk-test",
                                        max_tokens=64, temperature=0.1, transport=transport)

        text = await provider.generate("SYSTEM", "CTX", "Q")

        assert text == "hello"
        (request,) = requests
        assert request.url == "http://llm.local/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == "m1"
        assert body["max_tokens"] == 64
        assert body["messages"] == [
            {"role": "system", "content": "SYSTEM"},
            {"role": "user", "content": "CONTEXT: CTX\n\nQUERY: Q"},
        ]

    @pytest.mark.asyncio
    async def test_no_auth_header_without_key(self):
        """No Authorization header is sent without an API key."""
        from agentos.inference import OpenAICompatProvider

        transport, requests = _transport(lambda r: httpx.Response(
            200, json={"choices": [{"message": {"content": None}}]}
        ))
        provider = OpenAICompatProvider("http://llm.local", transport=transport)

        assert await provider.generate("s", "c", "q") == ""
        assert "Authorization" not in requests[0].headers

    @pytest.mark.asyncio
    async def test_server_error_becomes_generation_failure(self):
        """A 5xx response raises GenerationFailure with the status code."""
        from agentos.errors import GenerationFailure
        from agentos.inference import OpenAICompatProvider

        transport, _ = _transport(lambda r: httpx.Response(500, text="model crashed"))
        provider = OpenAICompatProvider("http://llm.local", transport=transport)

        with pytest.raises(GenerationFailure) as exc_info:
            await provider.generate("s", "c", "q")

        assert exc_info.value.status_code == 500
        assert exc_info.value.provider == "openai"
        assert "model crashed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_error_becomes_generation_failure(self):
        """An unreachable backend raises GenerationFailure."""
        from agentos.errors import GenerationFailure
        from agentos.inference import OpenAICompatProvider

        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = OpenAICompatProvider("http://llm.local", transport=httpx.MockTransport(refuse))

        with pytest.raises(GenerationFailure) as exc_info:
            await provider.generate("s", "c", "q")
        assert isinstance(exc_info.value.cause, httpx.ConnectError)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_unexpected_body_becomes_generation_failure(self):
        """A body without choices raises GenerationFailure."""
        from agentos.errors import GenerationFailure
        from agentos.inference import OpenAICompatProvider

        transport, _ = _transport(lambda r: httpx.Response(200, json={"choices": []}))
        provider = OpenAICompatProvider("http://llm.local", transport=transport)

        with pytest.raises(GenerationFailure, match="Unexpected response shape"):
            await provider.generate("s", "c", "q")


class TestOllama:

    @pytest.mark.asyncio
    async def test_returns_message_content(self):
        """Ollama chat content is returned and options carry sampling settings."""
        from agentos.inference import OllamaProvider

        transport, requests = _transport(lambda r: httpx.Response(
            200, json={"message": {"role": "assistant", "content": "hi from ollama"}, "done": True}
        ))
        provider = OllamaProvider(model_id="llama3", max_tokens=32, transport=transport)

        assert await provider.generate("s", "c", "q") == "hi from ollama"
        (request,) = requests
        assert request.url == "http://localhost:11434/api/chat"
        body = json.loads(request.content)
        assert body["stream"] is False
        assert body["options"] == {"num_predict": 32, "temperature": 0.7}

    @pytest.mark.asyncio
    async def test_error_field_becomes_generation_failure(self):
        """An Ollama error field raises GenerationFailure."""
        from agentos.errors import GenerationFailure
        from agentos.inference import OllamaProvider

        transport, _ = _transport(lambda r: httpx.Response(200, json={"error": "model not found"}))
        provider = OllamaProvider(transport=transport)

        with pytest.raises(GenerationFailure, match="model not found"):
            await provider.generate("s", "c", "q")


class TestFactory:

    def test_builds_configured_provider(self):
        """The factory builds the adapter named by the profile or argument."""
        from agentos.inference import OllamaProvider, OpenAICompatProvider, get_provider

        assert isinstance(get_provider(), OpenAICompatProvider)
        assert isinstance(get_provider("ollama"), OllamaProvider)

    def test_unknown_type(self):
        """An unknown backend type is rejected."""
        from agentos.inference import get_provider

        with pytest.raises(ValueError, match="Unknown inference backend"):
            get_provider("carrier-pigeon")
