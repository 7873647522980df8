"""Tone selection for the answer voice."""

import re
from typing import Optional

from ..models.chat import Tone

PERSONAL_KEYWORDS = [
    "personal story",
    "therapy",
    "mental health",
    "rage piece",
    "very personal",
    "healing",
    "trauma",
    "personal journey",
    "your story",
]

PERSONAL_DISABLED_NOTE = "Note: Personal/vulnerable mode is disabled; respond professionally."

_NARRATIVE_RE = re.compile(
    r"how did (you|y'all|your team) decide|tell me the story|what happened"
    r"|journey|why did you|walk me through",
    re.IGNORECASE,
)


def pick_tone(question: str, route_scope: Optional[str] = None, allow_personal: bool = False) -> Tone:
    """Pick the response tone for a question.

    Narrative cues or a project scope win; personal tone needs both an
    explicit personal keyword and the feature flag.
    """
    q = (question or "").lower()

    if _NARRATIVE_RE.search(q) or (route_scope or "").startswith("project-"):
        return Tone.NARRATIVE

    if allow_personal and any(k in q for k in PERSONAL_KEYWORDS):
        return Tone.PERSONAL

    return Tone.PROFESSIONAL


def resolve_tone(requested: Tone, allow_personal: bool) -> tuple[Tone, Optional[str]]:
    """Effective tone plus the system-prompt note for a downgrade, if any."""
    if requested is Tone.PERSONAL and not allow_personal:
        return Tone.PROFESSIONAL, PERSONAL_DISABLED_NOTE
    return requested, None

