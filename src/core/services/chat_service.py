"""Chat service - routes, retrieves, prompts and streams answers."""

import json
import logging
import math
import time
import uuid
from typing import AsyncIterator, Optional

from ..errors import GenerationError
from ..models.chat import ChatEvent, ChatHistory, Route, Tone
from ..protocols.llm import AnswerGeneratorProtocol
from .prompt_service import (
    CONTACT_REPLY,
    GENERIC_ERROR_MESSAGE,
    INSUFFICIENT_CONTEXT_MESSAGE,
    PONG,
    SMALL_TALK_REPLY,
    build_system_prompt,
    build_user_prompt,
    extract_citations,
)
from .router_service import RouterService
from .search_service import SearchService
from .tone_service import pick_tone, resolve_tone

logger = logging.getLogger(__name__)

PROMPT_VERSION = "1.0"
# Preceding messages sent to the generator (two user/assistant turns)
HISTORY_MESSAGES = 4


def new_correlation_id() -> str:
    return f"chat-{int(time.time() * 1000)}-{uuid.uuid4().hex[:7]}"


def estimate_tokens(text: str) -> int:
    """Rough token count at ~4 characters per token."""
    return math.ceil(len(text) / 4)


class ChatService:
    """Chat pipeline producing a stream of ChatEvents per message."""

    def __init__(
        self,
        generator: AnswerGeneratorProtocol,
        search_service: SearchService,
        router: RouterService,
        allow_personal: bool = False,
        allow_no_context: bool = False,
        contact_url: str = "https://cal.com",
        max_tokens: int = 1024,
        personal_max_tokens: int = 180,
        temperature: float = 0.3,
        top_p: float = 0.9,
    ):
        """Initialize chat service.

        Args:
            generator: Answer generator backend.
            search_service: Retrieval and reranking.
            router: Intent router.
            allow_personal: Enable the personal tone.
            allow_no_context: Call the generator even with no retrieved context.
            contact_url: Booking link used in contact replies.
            max_tokens: Answer token budget.
            personal_max_tokens: Answer token budget in personal tone.
            temperature: Sampling temperature.
            top_p: Nucleus sampling mass.
        """
        self._generator = generator
        self._search = search_service
        self._router = router
        self._allow_personal = allow_personal
        self._allow_no_context = allow_no_context
        self._contact_url = contact_url
        self._max_tokens = max_tokens
        self._personal_max_tokens = personal_max_tokens
        self._temperature = temperature
        self._top_p = top_p

    def _canned(self, text: str, route: Optional[Route] = None, tone: Optional[Tone] = None) -> list[ChatEvent]:
        return [
            ChatEvent(type="chunk", content=text, route=route),
            ChatEvent(type="done", tone=tone, route=route),
        ]

    async def process_message(
        self,
        user_message: str,
        history: Optional[ChatHistory] = None,
        scope: Optional[str] = None,
    ) -> AsyncIterator[ChatEvent]:
        """Handle one user message.

        Flow:
            1. "ping" answers "pong" without routing
            2. Small talk / contact intent get canned replies
            3. Retrieval; no context short-circuits with a fixed reply
            4. Tone, prompts, streamed generation, citations

        Args:
            user_message: User's message.
            history: Prior conversation.
            scope: Optional document id to focus retrieval on.

        Yields:
            ``chunk`` events, then exactly one ``done`` or ``error`` event.
        """
        if self._router.is_ping(user_message):
            for event in self._canned(PONG):
                yield event
            return

        route = self._router.route(user_message)
        if route is Route.SMALL_TALK:
            for event in self._canned(SMALL_TALK_REPLY, route):
                yield event
            return
        if route is Route.CONTACT:
            reply = CONTACT_REPLY.format(contact_url=self._contact_url)
            for event in self._canned(reply, route):
                yield event
            return

        start = time.monotonic()
        question = user_message.strip()
        search_response = await self._search.search(question, scope=scope)
        context = search_response.context

        if not context and not self._allow_no_context:
            logger.info(f"No context for '{question[:50]}', replying with insufficient context")
            for event in self._canned(INSUFFICIENT_CONTEXT_MESSAGE, route, Tone.PROFESSIONAL):
                yield event
            return

        requested = pick_tone(question, scope, allow_personal=True)
        tone, note = resolve_tone(requested, self._allow_personal)
        if note:
            logger.info("Personal tone requested but disabled; downgraded to professional")

        recent = history.to_list()[-HISTORY_MESSAGES:] if history and history.messages else []
        system_prompt = build_system_prompt(tone, note)
        user_prompt = build_user_prompt(question, context, recent)
        max_tokens = self._personal_max_tokens if tone is Tone.PERSONAL else self._max_tokens

        answer_parts: list[str] = []
        try:
            async for token in self._generator.stream(
                system_prompt=system_prompt,
                messages=recent + [{"role": "user", "content": user_prompt}],
                max_tokens=max_tokens,
                temperature=self._temperature,
                top_p=self._top_p,
            ):
                answer_parts.append(token)
                yield ChatEvent(type="chunk", content=token, route=route)
        except GenerationError as e:
            correlation_id = new_correlation_id()
            logger.error(
                json.dumps({
                    "correlationId": correlation_id,
                    "error": "Chat request failed",
                    "message": str(e),
                })
            )
            yield ChatEvent(
                type="error",
                content=GENERIC_ERROR_MESSAGE,
                route=route,
                correlation_id=correlation_id,
            )
            return

        answer = "".join(answer_parts)
        citations = extract_citations(answer, context)
        yield ChatEvent(type="done", citations=citations, tone=tone, route=route)

        logger.info(
            json.dumps({
                "correlationId": new_correlation_id(),
                "tone": tone.value,
                "promptVersion": PROMPT_VERSION,
                "topK": self._search.top_k,
                "finalK": len(context),
                "latencyMs": int((time.monotonic() - start) * 1000),
                "tokenIn": estimate_tokens(system_prompt + user_prompt),
                "tokenOut": estimate_tokens(answer),
                "citationCount": len(citations),
                "hasCitations": bool(citations),
            })
        )
