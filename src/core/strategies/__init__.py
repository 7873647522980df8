"""Scoring and query strategies."""
from .scoring import HeuristicScorer, query_terms
from .query_expansion import QueryExpansionStrategy

__all__ = [
    "HeuristicScorer",
    "QueryExpansionStrategy",
    "query_terms",
]
