
import logging
import math
import string
from typing import Optional

from ..models.document import Candidate

logger = logging.getLogger(__name__)


def query_terms(query: str) -> list[str]:
    """Whitespace-split, lowercased terms with edge punctuation removed."""
    terms = (t.strip(string.punctuation) for t in (query or "").lower().split())
    return [t for t in terms if t]


class HeuristicScorer:
    """Term-overlap score with title weighting and scope bonus.

    The raw score is divided by ln(len(text) + 1) so short, focused chunks
    beat long ones that collect matches by volume.
    """

    def __init__(
        self,
        text_weight: float = 1.0,
        title_weight: float = 2.0,
        scope_exact_bonus: float = 10.0,
        scope_prefix_bonus: float = 5.0,
    ):
        """Initialize scorer.

        Args:
            text_weight: Points per query term found in the chunk text.
            title_weight: Points per query term found in the chunk title.
            scope_exact_bonus: Bonus when the document id equals the scope.
            scope_prefix_bonus: Bonus when the document id starts with the scope.
        """
        self._text_weight = text_weight
        self._title_weight = title_weight
        self._scope_exact_bonus = scope_exact_bonus
        self._scope_prefix_bonus = scope_prefix_bonus

    def score(
        self,
        query: str,
        candidate: Candidate,
        scope: Optional[str] = None,
    ) -> float:
        text = candidate.text.lower()
        title = candidate.title.lower()

        raw = 0.0
        for term in query_terms(query):
            if term in text:
                raw += self._text_weight
            if term in title:
                raw += self._title_weight

        if scope:
            if candidate.doc_id == scope:
                raw += self._scope_exact_bonus
            elif candidate.doc_id.startswith(scope):
                raw += self._scope_prefix_bonus

        norm = math.log(len(candidate.text) + 1)
        return raw / norm if norm > 0 else raw

    def score_many(
        self,
        query: str,
        candidates: list[Candidate],
        scope: Optional[str] = None,
    ) -> list[float]:
        return [self.score(query, c, scope) for c in candidates]
