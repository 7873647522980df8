"""Index service - loads and caches the queryable index snapshot."""

import asyncio
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from ..errors import IndexLoadError, RetrievalError
from ..models.document import ChunkRecord, IndexBlob
from ..protocols.index_store import IndexStoreProtocol
from ..protocols.lexical_index import LexicalIndexProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedIndex:
    """Read-only snapshot shared by concurrent requests."""
    index: LexicalIndexProtocol
    lookup: Mapping[str, dict]
    store: Mapping[str, str]
    created_at: str = ""

    def search(self, query: str, limit: int = 10) -> list[str]:
        return self.index.search(query, limit)

    def get_record(self, chunk_id: str) -> Optional[ChunkRecord]:
        """Side-table record for a chunk, None for stale ids.

        Raises:
            RetrievalError: If the stored entry is malformed.
        """
        meta = self.lookup.get(chunk_id)
        text = self.store.get(chunk_id)
        if meta is None and text is None:
            return None
        if (meta is not None and not isinstance(meta, dict)) or (text is not None and not isinstance(text, str)):
            raise RetrievalError(f"Malformed side-table entry for {chunk_id}")

        meta = meta or {}
        text = text if text is not None else meta.get("preview", "")
        source_id = meta.get("sourceId") or chunk_id.split("#", 1)[0]
        return ChunkRecord(
            id=chunk_id,
            title=meta.get("title") or chunk_id,
            url=meta.get("url") or "",
            text=text,
            source_id=source_id,
            section_id=meta.get("sectionId") or "content",
            preview=meta.get("preview", ""),
        )


class IndexService:
    """Process-wide holder of the current index snapshot.

    The snapshot is replaced as a whole, never mutated, so requests that
    already hold one keep reading a complete index during a refresh.
    """

    def __init__(
        self,
        index_store: IndexStoreProtocol,
        index_factory: Callable[[], LexicalIndexProtocol],
        cache: bool = True,
    ):
        """Initialize index service.

        Args:
            index_store: Durable storage holding the index blob.
            index_factory: Creates an empty lexical index to import into.
            cache: Keep the loaded snapshot across requests.
        """
        self._store = index_store
        self._index_factory = index_factory
        self._cache = cache
        self._snapshot: Optional[LoadedIndex] = None
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    async def get(self) -> LoadedIndex:
        """Current snapshot, loading it on first use.

        Raises:
            IndexLoadError: Storage unavailable or blob malformed.
        """
        if not self._cache:
            return await self._load()

        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot

        async with self._lock:
            if self._snapshot is None:
                self._snapshot = await self._load()
            return self._snapshot

    async def refresh(self) -> LoadedIndex:
        """Load a new snapshot and swap it in once complete."""
        snapshot = await self._load()
        self._snapshot = snapshot
        logger.info(f"Index snapshot refreshed ({len(snapshot.store)} chunks)")
        return snapshot

    def invalidate(self) -> None:
        """Drop the cached snapshot; the next get() reloads."""
        self._snapshot = None

    async def _load(self) -> LoadedIndex:
        blob = await self._store.load()
        index = self._build_index(blob)
        return LoadedIndex(
            index=index,
            lookup=MappingProxyType(dict(blob.lookup)),
            store=MappingProxyType(dict(blob.store)),
            created_at=blob.created_at,
        )

    def _build_index(self, blob: IndexBlob) -> LexicalIndexProtocol:
        index = self._index_factory()

        if blob.index:
            try:
                index.import_(blob.index)
            except (ValueError, TypeError, KeyError) as e:
                raise IndexLoadError(f"Malformed serialized index: {e}") from e
            logger.info(
                f"Index imported (lookup={bool(blob.lookup)}, store={bool(blob.store)})"
            )
        elif blob.store:
            logger.info("Index blob has no serialized index; rebuilding from store")
            try:
                for chunk_id, text in blob.store.items():
                    title = (blob.lookup.get(chunk_id) or {}).get("title", "")
                    index.add(chunk_id, f"{title} {text}")
            except (AttributeError, TypeError) as e:
                raise IndexLoadError(f"Malformed index side tables: {e}") from e
            logger.info(f"Index rebuild complete: {len(blob.store)} chunks")
        else:
            logger.warning("Index blob has neither serialized index nor store; retrieval will be empty")

        return index
