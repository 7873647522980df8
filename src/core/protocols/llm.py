"""Answer generator protocol for dependency injection."""
from typing import AsyncIterator, Protocol, runtime_checkable


@runtime_checkable
class AnswerGeneratorProtocol(Protocol):
    """Protocol for the text-generation backend."""

    def stream(
        self,
        system_prompt: str,
        messages: list[dict],
        max_tokens: int = 1024,
        temperature: float = 0.3,
        top_p: float = 0.9,
    ) -> AsyncIterator[str]:
        """Stream generated text.

        Args:
            system_prompt: System prompt.
            messages: Conversation as role/content dicts, last one is the user prompt.
            max_tokens: Max response tokens.
            temperature: Sampling temperature.
            top_p: Nucleus sampling mass.

        Yields:
            Response tokens.
        """
        ...
