"""Candidate scorer protocol for dependency injection."""
from typing import Optional, Protocol, runtime_checkable

from ..models.document import Candidate


@runtime_checkable
class ScorerProtocol(Protocol):
    """Protocol for relevance scoring of retrieval candidates."""

    def score(
        self,
        query: str,
        candidate: Candidate,
        scope: Optional[str] = None,
    ) -> float:
        """Score one candidate against the query.

        Args:
            query: User query.
            candidate: Candidate to score.
            scope: Optional document id the request is scoped to.

        Returns:
            Relevance score, higher is better.
        """
        ...

    def score_many(
        self,
        query: str,
        candidates: list[Candidate],
        scope: Optional[str] = None,
    ) -> list[float]:
        """Score a batch of candidates; one score per candidate, in order.

        Called from a worker thread, so implementations may block.
        """
        ...
