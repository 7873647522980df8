import logging
from typing import AsyncIterator

from openai import AsyncOpenAI, OpenAIError

from src.core.errors import GenerationError

logger = logging.getLogger(__name__)


class OllamaClient:
    """Answer generator for Ollama (OpenAI-compatible API)."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434/v1",
        model: str = "qwen2.5:7b",
        api_key: str = "ollama",
    ):
        """Initialize Ollama client.

        Args:
            base_url: OpenAI-compatible API URL.
            model: Model name.
            api_key: API key; Ollama ignores it.
        """
        self._client = AsyncOpenAI(base_url=base_url, api_key=api_key)
        self._model = model

    async def stream(
        self,
        system_prompt: str,
        messages: list[dict],
        max_tokens: int = 1024,
        temperature: float = 0.3,
        top_p: float = 0.9,
    ) -> AsyncIterator[str]:
        """Stream an answer.

        Args:
            system_prompt: System prompt.
            messages: Conversation, last message is the user prompt.
            max_tokens: Max response tokens.
            temperature: Sampling temperature.
            top_p: Nucleus sampling mass.

        Yields:
            Response tokens.

        Raises:
            GenerationError: If the backend call or stream fails.
        """
        payload = [{"role": "system", "content": system_prompt}, *messages]

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=payload,
                max_tokens=max_tokens,
                temperature=temperature,
                top_p=top_p,
                stream=True,
            )
        except OpenAIError as e:
            logger.error(f"[llm] Request failed: {e}")
            raise GenerationError(f"LLM request failed: {e}") from e

        try:
            async for chunk in response:
                if not chunk.choices:
                    continue
                token = chunk.choices[0].delta.content
                if token:
                    yield token
        except OpenAIError as e:
            logger.error(f"[llm] Stream error: {e}")
            raise GenerationError(f"LLM stream failed: {e}") from e
