"""Chat domain models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .document import Citation


class Route(Enum):
    """Intent routing decision for an incoming message."""
    SMALL_TALK = "small_talk"
    CONTACT = "contact"
    PROCEED = "proceed"


class Tone(Enum):
    """Response register used for the system prompt."""
    PROFESSIONAL = "professional"
    NARRATIVE = "narrative"
    PERSONAL = "personal"


@dataclass
class ChatMessage:
    """Chat message."""
    role: str  # "user" | "assistant"
    content: str


@dataclass
class ChatHistory:
    """Chat history with limit."""
    messages: list[ChatMessage] = field(default_factory=list)
    max_messages: int = 10

    def add(self, message: ChatMessage) -> None:
        """Add message to history."""
        self.messages.append(message)
        if len(self.messages) > self.max_messages:
            self.messages = self.messages[-self.max_messages:]

    def add_pair(self, user_content: str, assistant_content: str) -> None:
        """Add user/assistant message pair."""
        self.add(ChatMessage(role="user", content=user_content))
        self.add(ChatMessage(role="assistant", content=assistant_content))

    def to_list(self) -> list[dict]:
        """Convert to list of dicts for LLM."""
        return [{"role": m.role, "content": m.content} for m in self.messages]


@dataclass
class ChatEvent:
    """One event of a streamed chat response."""
    type: str  # "chunk" | "done" | "error"
    content: str = ""
    citations: list[Citation] = field(default_factory=list)
    tone: Optional[Tone] = None
    route: Optional[Route] = None
    correlation_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Wire form used by streaming clients."""
        if self.type == "chunk":
            return {"type": "chunk", "content": self.content}
        if self.type == "error":
            return {
                "type": "error",
                "message": self.content,
                "correlationId": self.correlation_id,
            }
        payload: dict[str, Any] = {
            "type": "done",
            "citations": [c.to_dict() for c in self.citations],
        }
        if self.tone is not None:
            payload["tone"] = self.tone.value
        return payload
