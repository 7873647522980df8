
import logging
import re

logger = logging.getLogger(__name__)


class QueryExpansionStrategy:
    """Append synonyms for acronyms and broad themes before index search."""

    DEFAULT_EXPANSIONS: list[tuple[str, list[str]]] = [
        (r"\bcns\b", [
            "Central Nervous System",
            "AI-Powered Innovation Platform",
            "innovation platform",
            "innovation copilot",
            "CNS platform",
        ]),
        (r"\bras\b", ["Replenishment at Sea", "RAS simulator"]),
        (r"\bphilosophy\b", [
            "leadership philosophy",
            "product philosophy",
            "teaching philosophy",
        ]),
        (r"\b(achievement|best|win)\b", [
            "achievements",
            "major achievements",
            "biggest wins",
            "results",
            "metrics",
        ]),
    ]

    def __init__(self, expansions: list[tuple[str, list[str]]] | None = None):
        """Initialize strategy.

        Args:
            expansions: Custom (regex, phrases) pairs.
        """
        pairs = expansions if expansions is not None else self.DEFAULT_EXPANSIONS
        self._expansions = [(re.compile(p, re.IGNORECASE), phrases) for p, phrases in pairs]

    def apply(self, query: str) -> str:
        """Return the query followed by the phrases of every matching rule."""
        parts = [query]
        for pattern, phrases in self._expansions:
            if pattern.search(query):
                parts.extend(phrases)

        if len(parts) > 1:
            logger.info(f"Query expansion: +{len(parts) - 1} phrases for '{query[:50]}'")
        return " ".join(parts)
