"""Search service - candidate retrieval, scoring and reranking."""

import asyncio
import logging
import re
from typing import Optional

from ..errors import IndexLoadError, RetrievalError
from ..models.document import Candidate, ContextEntry, SearchResponse
from ..protocols.scorer import ScorerProtocol
from ..strategies.query_expansion import QueryExpansionStrategy
from ..strategies.scoring import HeuristicScorer
from .index_service import IndexService, LoadedIndex

logger = logging.getLogger(__name__)

SCOPE_BOOST = "boost"
SCOPE_FILTER = "filter"

_FALLBACK_MAX_TERMS = 6
_FALLBACK_PER_TERM = 12
_FALLBACK_STOPWORDS = {
    "the", "and", "for", "you", "your", "are", "was", "what", "how", "why",
    "who", "did", "does", "with", "about", "tell", "can", "have", "has",
    "that", "this", "from", "any", "his", "her", "their",
}


def rerank_candidates(candidates: list[Candidate], max_snippets: int = 5) -> list[Candidate]:
    """Keep the best candidate per (document, section), best first.

    Pure and idempotent: ties keep their input order.
    """
    best: dict[tuple[str, str], Candidate] = {}
    for candidate in candidates:
        key = (candidate.doc_id, candidate.section_id)
        current = best.get(key)
        if current is None or candidate.score > current.score:
            best[key] = candidate

    ranked = sorted(best.values(), key=lambda c: c.score, reverse=True)
    return ranked[:max(max_snippets, 0)]


def build_snippet(text: str, query: str, max_len: int = 400) -> str:
    """Snippet of at most max_len chars centred near the query."""
    clean = re.sub(r"\s+", " ", text or "").strip()
    if not clean:
        return ""

    index = clean.lower().find((query or "").strip().lower()) if query.strip() else -1
    if index == -1:
        return clean if len(clean) <= max_len else clean[: max_len - 1] + "…"

    start = max(0, index - max_len // 3)
    end = min(len(clean), start + max_len)
    prefix = "…" if start > 0 else ""
    suffix = "…" if end < len(clean) else ""
    body = clean[start:end]
    overflow = len(prefix) + len(body) + len(suffix) - max_len
    if overflow > 0:
        body = body[: len(body) - overflow]
    return f"{prefix}{body}{suffix}"


class SearchService:
    """Lexical retrieval with pluggable scoring and dedup reranking."""

    def __init__(
        self,
        index_service: IndexService,
        scorer: ScorerProtocol | None = None,
        query_expansion: QueryExpansionStrategy | None = None,
        top_k: int = 12,
        max_snippets: int = 4,
        snippet_length: int = 400,
        scope_mode: str = SCOPE_BOOST,
    ):
        """Initialize search service.

        Args:
            index_service: Provider of the loaded index snapshot.
            scorer: Relevance scorer, heuristic by default.
            query_expansion: Expansion applied before index search.
            top_k: Candidates returned by retrieval.
            max_snippets: Context entries kept after reranking.
            snippet_length: Max snippet length per context entry.
            scope_mode: "boost" or "filter" handling of the scope.
        """
        if scope_mode not in (SCOPE_BOOST, SCOPE_FILTER):
            raise ValueError(f"Unknown scope mode: {scope_mode}")

        self._index_service = index_service
        self._scorer = scorer or HeuristicScorer()
        self._query_expansion = query_expansion or QueryExpansionStrategy()
        self._top_k = top_k
        self._max_snippets = max_snippets
        self._snippet_length = snippet_length
        self._scope_mode = scope_mode

    @property
    def top_k(self) -> int:
        return self._top_k

    async def retrieve_candidates(
        self,
        query: str,
        top_k: Optional[int] = None,
        scope: Optional[str] = None,
    ) -> list[Candidate]:
        """Retrieve and score candidates for a query.

        Args:
            query: User query.
            top_k: Number of candidates to return.
            scope: Optional document id to boost or filter by.

        Returns:
            Candidates sorted by score (descending); empty when nothing matches.

        Raises:
            IndexLoadError: If the index cannot be loaded.
        """
        top_k = top_k or self._top_k
        trimmed = (query or "").strip()
        if not trimmed:
            return []

        loaded = await self._index_service.get()

        pool = top_k * 2
        expanded = self._query_expansion.apply(trimmed)
        ids = loaded.search(expanded, pool)
        if not ids:
            ids = self._fallback_search(loaded, expanded, pool)

        logger.info(f"RAG search: q='{trimmed[:50]}' ids={len(ids)}")

        fetched = await asyncio.gather(
            *(self._fetch_candidate(loaded, chunk_id) for chunk_id in ids)
        )

        candidates = [
            c for c in fetched
            if c is not None and not (scope and self._scope_mode == SCOPE_FILTER and c.doc_id != scope)
        ]
        if candidates:
            # Model scorers block; keep them off the event loop
            scores = await asyncio.to_thread(self._scorer.score_many, trimmed, candidates, scope)
            for candidate, value in zip(candidates, scores):
                candidate.score = value

        candidates.sort(key=lambda c: c.score, reverse=True)
        return candidates[:top_k]

    async def _fetch_candidate(self, loaded: LoadedIndex, chunk_id: str) -> Optional[Candidate]:
        try:
            record = loaded.get_record(chunk_id)
        except RetrievalError as e:
            logger.warning(f"Skip candidate {chunk_id}: {e}")
            return None

        if record is None:
            logger.warning(f"Skip candidate {chunk_id}: no stored record")
            return None

        return Candidate(
            id=record.id,
            doc_id=record.source_id,
            section_id=record.section_id,
            text=record.text,
            source_url=record.url,
            title=record.title,
        )

    def _fallback_search(self, loaded: LoadedIndex, query: str, max_results: int) -> list[str]:
        """Search term by term when the full query matches nothing."""
        normalized = re.sub(r"[^a-zA-Z0-9\s]", " ", query).lower()
        terms = [
            t for t in dict.fromkeys(normalized.split())
            if len(t) > 2 and t not in _FALLBACK_STOPWORDS
        ][:_FALLBACK_MAX_TERMS]

        results: list[str] = []
        seen: set[str] = set()
        for term in terms:
            for chunk_id in loaded.search(term, _FALLBACK_PER_TERM):
                if chunk_id in seen:
                    continue
                seen.add(chunk_id)
                results.append(chunk_id)
                if len(results) >= max_results:
                    return results

        if results:
            logger.info(f"Fallback search: {len(results)} ids from {len(terms)} terms")
        return results

    def rerank(self, candidates: list[Candidate], max_snippets: Optional[int] = None) -> list[Candidate]:
        return rerank_candidates(candidates, max_snippets or self._max_snippets)

    def to_context(self, candidates: list[Candidate], query: str) -> list[ContextEntry]:
        return [
            ContextEntry(
                title=c.title,
                source_url=c.source_url,
                snippet=build_snippet(c.text, query, self._snippet_length),
            )
            for c in candidates
        ]

    async def search(
        self,
        query: str,
        scope: Optional[str] = None,
        top_k: Optional[int] = None,
        max_snippets: Optional[int] = None,
    ) -> SearchResponse:
        """Retrieve, rerank and build context entries.

        Any retrieval failure degrades to an empty response.
        """
        try:
            candidates = await self.retrieve_candidates(query, top_k=top_k, scope=scope)
        except IndexLoadError as e:
            logger.error(f"Search error: {e}")
            return SearchResponse(candidates=[], context=[], sources=[])
        except Exception as e:
            logger.exception(f"Search failed for '{query[:50]}': {e}")
            return SearchResponse(candidates=[], context=[], sources=[])

        ranked = self.rerank(candidates, max_snippets)
        logger.info(
            f"Search: {len(candidates)} candidates -> {len(ranked)} snippets for '{query[:50]}'"
        )
        return SearchResponse(
            candidates=ranked,
            context=self.to_context(ranked, query),
            sources=self._get_unique_sources(ranked),
        )

    def _get_unique_sources(self, candidates: list[Candidate]) -> list[str]:
        seen = set()
        sources = []
        for c in candidates:
            if c.doc_id not in seen:
                seen.add(c.doc_id)
                sources.append(c.doc_id)
        return sources
