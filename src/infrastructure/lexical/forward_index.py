import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[^\W_]+")

EXPORT_FORMAT = "forward"


def tokenize(text: str, min_length: int = 2) -> list[str]:
    """Lowercase word tokens, dropping tokens shorter than min_length."""
    return [t for t in _TOKEN_RE.findall((text or "").lower()) if len(t) >= min_length]


class ForwardIndex:
    """Inverted index with forward (prefix) tokenization.

    Every indexed token is stored under each of its prefixes, so a query
    token matches any indexed token it is a prefix of ("lead" finds
    "leadership"). A document matches a query when it matches every query
    token.
    """

    def __init__(self, min_token_length: int = 2):
        """Initialize empty index.

        Args:
            min_token_length: Shortest token and prefix that gets indexed.
        """
        self._min_length = min_token_length
        self._ids: list[str] = []
        self._positions: dict[str, int] = {}
        self._map: dict[str, dict[int, int]] = {}

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, doc_id: str) -> bool:
        return doc_id in self._positions

    def add(self, doc_id: str, text: str) -> None:
        """Index text under doc_id; re-adding an id is ignored."""
        if doc_id in self._positions:
            logger.debug(f"Skip duplicate id: {doc_id}")
            return

        pos = len(self._ids)
        self._ids.append(doc_id)
        self._positions[doc_id] = pos

        for token in tokenize(text, self._min_length):
            for end in range(self._min_length, len(token) + 1):
                postings = self._map.setdefault(token[:end], {})
                postings[pos] = postings.get(pos, 0) + 1

    def search(self, query: str, limit: int = 10) -> list[str]:
        """Return ids matching every query token, most hits first."""
        terms = list(dict.fromkeys(tokenize(query, self._min_length)))
        if not terms or limit <= 0:
            return []

        scores: dict[int, int] | None = None
        for term in terms:
            postings = self._map.get(term)
            if not postings:
                return []
            if scores is None:
                scores = dict(postings)
            else:
                scores = {
                    pos: hits + postings[pos]
                    for pos, hits in scores.items()
                    if pos in postings
                }
            if not scores:
                return []

        ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
        return [self._ids[pos] for pos, _ in ranked[:limit]]

    def export(self) -> dict[str, Any]:
        return {
            "tokenize": EXPORT_FORMAT,
            "minLength": self._min_length,
            "ids": list(self._ids),
            "map": {
                prefix: [[pos, hits] for pos, hits in postings.items()]
                for prefix, postings in self._map.items()
            },
        }

    def import_(self, data: dict[str, Any]) -> None:
        """Replace index contents with exported data.

        Raises:
            ValueError: If data is not a forward index export.
        """
        if not isinstance(data, dict) or data.get("tokenize") != EXPORT_FORMAT:
            raise ValueError("Unsupported lexical index export")

        ids = data.get("ids") or []
        raw_map = data.get("map") or {}
        self._min_length = int(data.get("minLength", self._min_length))
        self._ids = [str(i) for i in ids]
        self._positions = {doc_id: pos for pos, doc_id in enumerate(self._ids)}
        self._map = {}
        for prefix, postings in raw_map.items():
            self._map[prefix] = {int(pos): int(hits) for pos, hits in postings}
