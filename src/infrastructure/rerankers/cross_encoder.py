import logging
from typing import Optional

from sentence_transformers import CrossEncoder

from src.core.models.document import Candidate

logger = logging.getLogger(__name__)


class CrossEncoderScorer:
    """Candidate scorer using CrossEncoder models."""

    def __init__(self, model_name: str = "BAAI/bge-reranker-v2-m3", scope_bonus: float = 1.0):
        """Initialize scorer.

        Args:
            model_name: HuggingFace model name.
            scope_bonus: Added to candidates from the scoped document.
        """
        logger.info(f"Loading reranker: {model_name}")
        self._model = CrossEncoder(model_name)
        self._scope_bonus = scope_bonus
        logger.info("Reranker loaded")

    def score(self, query: str, candidate: Candidate, scope: Optional[str] = None) -> float:
        """Relevance of the candidate title and text to the query."""
        return self.score_many(query, [candidate], scope)[0]

    def score_many(
        self,
        query: str,
        candidates: list[Candidate],
        scope: Optional[str] = None,
    ) -> list[float]:
        """Score all candidates with a single batched predict call."""
        if not candidates:
            return []

        pairs = [
            [query, f"{c.title}\n{c.text}" if c.title else c.text]
            for c in candidates
        ]
        raw = self._model.predict(pairs)

        scores = []
        for candidate, value in zip(candidates, raw):
            value = float(value)
            if scope and candidate.doc_id == scope:
                value += self._scope_bonus
            scores.append(value)

        logger.debug(f"Reranker scored {len(scores)} candidates")
        return scores
