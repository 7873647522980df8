"""Router service - decides how an incoming message is handled."""

import json
import logging
import re
from pathlib import Path

from ..models.chat import Route

logger = logging.getLogger(__name__)

PING = "ping"

DEFAULT_CONFIG = {
    "small_talk_patterns": [
        "hi", "hey", "hello", "yo", "sup", "thanks", "thank you", "thx",
        "ok", "okay", "cool", "nice", "great", "bye", "goodbye",
        "good morning", "good evening", "how are you", "what's up",
    ],
    "contact_patterns": [
        "hire", "availability", "book", "rate", "contact", "email",
        "linkedin", "schedule", "cal.com",
    ],
    "small_talk_max_length": 20,
    "debug": False,
}


def _word_pattern(phrase: str) -> re.Pattern:
    return re.compile(rf"(?<![\w.]){re.escape(phrase.lower())}(?![\w])")


# Words allowed after a greeting, as in "hi there" or "thanks again"
_SMALL_TALK_FILLERS = ["there", "again", "all", "so much", "a lot"]


def _small_talk_pattern(phrases: list[str]) -> re.Pattern | None:
    """Whole-message matcher: one or more greetings plus fillers and punctuation."""
    if not phrases:
        return None
    greeting = "|".join(re.escape(p.lower()) for p in sorted(phrases, key=len, reverse=True))
    filler = "|".join(re.escape(f) for f in _SMALL_TALK_FILLERS)
    return re.compile(rf"(?:{greeting})(?:[\s,.!]+(?:{greeting}|{filler}))*[\s,.!?]*")


class RouterService:
    """Pattern router: small talk, then contact intent, else retrieval."""

    def __init__(self, config_path: str = "router_config.json", debug: bool = False):
        """Initialize router.

        Args:
            config_path: Path to router config JSON.
            debug: Log every routing decision.
        """
        self._debug = debug
        self._config = self._load_config(config_path)
        self._debug = debug or bool(self._config.get("debug", False))
        self._max_length = int(self._config.get("small_talk_max_length", 20))
        self._small_talk = _small_talk_pattern(self._config.get("small_talk_patterns", []))
        self._contact = [
            (p, _word_pattern(p)) for p in self._config.get("contact_patterns", [])
        ]

    def _load_config(self, path: str) -> dict:
        """Load config from JSON, falling back to built-in patterns."""
        config_file = Path(path)
        if not config_file.exists():
            logger.warning(f"Router config {path} not found, using defaults")
            return dict(DEFAULT_CONFIG)

        with open(config_file, "r", encoding="utf-8") as f:
            config = json.load(f)
        self._log(f"Config loaded from {path}")
        return {**DEFAULT_CONFIG, **config}

    def _log(self, message: str) -> None:
        if self._debug:
            logger.info(f"[router] {message}")

    @staticmethod
    def is_ping(text: str) -> bool:
        """Liveness fast path: exact "ping" after trimming."""
        return (text or "").strip() == PING

    def is_small_talk(self, text: str) -> bool:
        trimmed = (text or "").strip().lower()
        if not trimmed or len(trimmed) > self._max_length or self._small_talk is None:
            return False
        return self._small_talk.fullmatch(trimmed) is not None

    def is_contact(self, text: str) -> bool:
        lowered = (text or "").lower()
        for phrase, pattern in self._contact:
            if pattern.search(lowered):
                self._log(f"Contact pattern: '{phrase}'")
                return True
        return False

    def route(self, text: str) -> Route:
        """Route a message.

        Short messages made up only of greetings are small talk, so questions
        that merely open with a greeting still reach retrieval.
        """
        if self.is_small_talk(text):
            self._log(f"SmallTalk: '{text.strip()[:30]}'")
            return Route.SMALL_TALK

        if self.is_contact(text):
            return Route.CONTACT

        self._log(f"Proceed: '{(text or '').strip()[:50]}'")
        return Route.PROCEED
