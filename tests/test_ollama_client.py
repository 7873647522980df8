"""Tests for the OpenAI-compatible answer generator."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from openai import OpenAIError

from src.core.errors import GenerationError
from src.core.protocols.llm import AnswerGeneratorProtocol
from src.infrastructure.llm.ollama_client import OllamaClient


def _chunk(content):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


class _Stream:
    def __init__(self, items, error: Exception | None = None):
        self._items = list(items)
        self._error = error

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._items:
            return self._items.pop(0)
        if self._error is not None:
            error, self._error = self._error, None
            raise error
        raise StopAsyncIteration


def _client(create: AsyncMock) -> OllamaClient:
    with patch("src.infrastructure.llm.ollama_client.AsyncOpenAI") as openai_cls:
        openai_cls.return_value = MagicMock()
        openai_cls.return_value.chat.completions.create = create
        return OllamaClient(base_url="http://llm:11434/v1", model="test-model")


async def _tokens(client: OllamaClient) -> list[str]:
    return [
        t
        async for t in client.stream(
            system_prompt="system",
            messages=[{"role": "user", "content": "question"}],
            max_tokens=64,
            temperature=0.1,
            top_p=0.5,
        )
    ]


def test_satisfies_protocol():
    client = _client(AsyncMock())
    assert isinstance(client, AnswerGeneratorProtocol)


@pytest.mark.asyncio
async def test_streams_tokens_and_skips_empty_deltas():
    create = AsyncMock(return_value=_Stream([_chunk("Hel"), _chunk(None), _chunk("lo")]))
    client = _client(create)

    assert await _tokens(client) == ["Hel", "lo"]

    kwargs = create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["messages"][0] == {"role": "system", "content": "system"}
    assert kwargs["messages"][1] == {"role": "user", "content": "question"}
    assert kwargs["max_tokens"] == 64
    assert kwargs["top_p"] == 0.5
    assert kwargs["stream"] is True


@pytest.mark.asyncio
async def test_request_failure_raises_generation_error():
    client = _client(AsyncMock(side_effect=OpenAIError("connection refused")))

    with pytest.raises(GenerationError):
        await _tokens(client)


@pytest.mark.asyncio
async def test_stream_failure_raises_generation_error():
    create = AsyncMock(return_value=_Stream([_chunk("partial")], error=OpenAIError("reset")))
    client = _client(create)

    with pytest.raises(GenerationError):
        await _tokens(client)
