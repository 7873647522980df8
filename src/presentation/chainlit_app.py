import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import chainlit as cl

from src.config.settings import settings
from src.container import configure_container, container
from src.core.errors import IndexLoadError
from src.core.models.chat import ChatHistory
from src.core.models.document import Citation
from src.core.services.chat_service import ChatService
from src.core.services.index_service import IndexService

configure_container(settings)

_SCOPE_COMMAND = "/scope"


def _format_citations(citations: list[Citation]) -> str:
    if not citations:
        return ""
    lines = [f"[{i}] [{c.title}]({c.source_url})" for i, c in enumerate(citations, start=1)]
    return "\n\n**Sources**\n" + "\n".join(lines)


def _handle_scope_command(text: str) -> str:
    """`/scope <doc-id>` focuses retrieval on one document, `/scope` clears it."""
    parts = text.split(maxsplit=1)
    scope = parts[1].strip() if len(parts) > 1 else None
    cl.user_session.set("scope", scope)
    if scope:
        return f"Focusing on **{scope}**. Send `/scope` to search everything again."
    return "Searching across the whole portfolio again."


@cl.on_chat_start
async def start():
    cl.user_session.set("history", ChatHistory())
    cl.user_session.set("scope", None)

    # Load the index up front so the first question does not pay for it
    index_service = container.resolve(IndexService)
    try:
        await index_service.get()
    except IndexLoadError as e:
        await cl.Message(content=f"Index is not available yet: {e}").send()

    await cl.Message(
        content="Hi! I'm the portfolio concierge.\n\n"
        "Ask about projects, leadership, teaching or the resume, and I'll answer with sources."
    ).send()


@cl.on_message
async def main(message: cl.Message):
    user_input = message.content.strip()
    history: ChatHistory | None = cl.user_session.get("history")
    if history is None:
        history = ChatHistory()
        cl.user_session.set("history", history)

    if user_input.startswith(_SCOPE_COMMAND):
        await cl.Message(content=_handle_scope_command(user_input)).send()
        return

    chat_service = container.resolve(ChatService)

    msg = cl.Message(content="")
    await msg.send()

    full_response = ""
    async for event in chat_service.process_message(
        user_input,
        history,
        scope=cl.user_session.get("scope"),
    ):
        if event.type == "chunk":
            full_response += event.content
            await msg.stream_token(event.content)
        elif event.type == "done":
            sources = _format_citations(event.citations)
            if sources:
                await msg.stream_token(sources)
            if event.tone is not None:
                msg.metadata = {"tone": event.tone.value}
        else:
            error_text = f"{event.content} (ref: {event.correlation_id})"
            await msg.stream_token(error_text)

    await msg.update()
    history.add_pair(user_input, full_response)


@cl.on_stop
async def stop():
    await cl.Message(content="Generation stopped").send()
