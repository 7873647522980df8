"""Prompt assembly and citation extraction."""

import re
from typing import Optional

from ..models.chat import Tone
from ..models.document import Citation, ContextEntry

TONE_PLACEHOLDER = "{{TONE_BLOCK}}"

SYSTEM_PROMPT_BASE = """You are the site owner's portfolio concierge.

GOAL
- Help visitors understand the owner's experience, decisions and impact quickly, with sources.

SCOPE
- Answer ONLY from the provided context (projects, case studies, resume).
- If the context is insufficient, say: "I don't have that in my sources. I can share what's here or you can contact me."
- Never invent employers, titles, dates or metrics.

FORMAT
- Prefer 3-6 concise bullets and a 1-2 sentence wrap-up.
- Keep answers under ~160 words unless asked for depth.
- Cite sources inline as [1], [2] using the context numbers.

REFUSALS & SAFETY
- Decline personal details not present in the sources.
- No medical or therapeutic advice. For mental-health themes, use supportive language and steer back to the portfolio unless explicitly requested.
- Ask at most one brief clarifying question if necessary.

TONE = {{TONE_BLOCK}}"""

TONE_BLOCKS: dict[Tone, str] = {
    Tone.PROFESSIONAL: """
VOICE & TONE
- First person, professional, approachable and concise; confident without hype.
- Precise nouns and strong verbs; favor outcomes and constraints over adjectives.
- Close with a one-sentence synthesis.""",
    Tone.NARRATIVE: """
VOICE & TONE
- First-person narrative with clear beats: situation, insight, decision, result.
- Simple sentences, minimal jargon, one explicit lesson at the end.
- Keep the story tied to product impact.""",
    Tone.PERSONAL: """
VOICE & TONE (only when the visitor explicitly asks)
- First person, reflective and compassionate. Short lines, plain language.
- Start with a brief content note. Close by reconnecting to leadership growth.
- Max 180 words. Invite returning to portfolio topics afterwards.""",
}

USER_PROMPT_INSTRUCTIONS = (
    "Answer the question using only the context above. "
    "Cite the context numbers inline as [1], [2]. "
    "If the context does not answer the question, say so."
)

INSUFFICIENT_CONTEXT_MESSAGE = (
    "I don't have that in my sources. I can share what's here, "
    "or you can contact me directly."
)
GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
SMALL_TALK_REPLY = (
    "Hi! Ask me about my projects, leadership style, teaching or resume."
)
CONTACT_REPLY = "Happy to talk. You can book time with me here: {contact_url}"
PONG = "pong"

HISTORY_TURNS = 2

_CITATION_RE = re.compile(r"\[(\d+)\]")


def build_system_prompt(tone: Tone, note: Optional[str] = None) -> str:
    """Base template with the tone voice block substituted in."""
    prompt = SYSTEM_PROMPT_BASE.replace(TONE_PLACEHOLDER, TONE_BLOCKS[tone])
    if note:
        prompt = f"{prompt}\n\n{note}"
    return prompt


def build_user_prompt(
    question: str,
    context_entries: list[ContextEntry],
    history: Optional[list[dict]] = None,
) -> str:
    """Question, numbered context, instructions and the last turns of history."""
    parts = [f"Question: {question}", ""]

    parts.append("Context:")
    for i, entry in enumerate(context_entries, start=1):
        parts.append(f"[{i}] ({entry.title}) {entry.snippet}")
    parts.append("")
    parts.append(USER_PROMPT_INSTRUCTIONS)

    if history:
        parts.append("")
        parts.append("Recent conversation:")
        for turn in history[-HISTORY_TURNS:]:
            role = "User" if turn.get("role") == "user" else "Assistant"
            parts.append(f"{role}: {turn.get('content', '')}")

    return "\n".join(parts)


def extract_citations(answer: str, context_entries: list[ContextEntry]) -> list[Citation]:
    """Map [n] markers to context entries.

    First-appearance order, no duplicates; markers outside 1..len(entries)
    are ignored.
    """
    citations: list[Citation] = []
    seen: set[int] = set()
    for match in _CITATION_RE.finditer(answer or ""):
        n = int(match.group(1))
        if n < 1 or n > len(context_entries) or n in seen:
            continue
        seen.add(n)
        entry = context_entries[n - 1]
        citations.append(Citation(title=entry.title, source_url=entry.source_url))
    return citations
