"""Shared test doubles."""

from src.core.models.document import IndexBlob
from src.infrastructure.lexical import ForwardIndex


class MemoryIndexStore:
    """In-memory index store recording saves."""

    def __init__(self, blob: IndexBlob | None = None, metadata=None, error: Exception | None = None):
        self.blob = blob
        self.metadata = metadata
        self.error = error
        self.load_calls = 0
        self.saves = []

    async def load(self) -> IndexBlob:
        self.load_calls += 1
        if self.error is not None:
            raise self.error
        return self.blob

    async def save(self, blob, metadata) -> None:
        self.saves.append((blob, metadata))
        self.blob = blob
        self.metadata = metadata

    async def load_metadata(self):
        return self.metadata


def build_blob(chunks: dict[str, tuple[str, str]], serialize: bool = True) -> IndexBlob:
    """Blob from {chunk_id: (title, text)}, all chunks in the `content` section."""
    index = ForwardIndex()
    lookup = {}
    store = {}
    for chunk_id, (title, text) in chunks.items():
        doc_id = chunk_id.split("#", 1)[0]
        index.add(chunk_id, f"{title} {text}")
        lookup[chunk_id] = {
            "title": title,
            "url": f"/docs/{doc_id}",
            "preview": text[:300],
            "sourceId": doc_id,
            "sectionId": "content",
        }
        store[chunk_id] = text
    return IndexBlob(
        version=2,
        created_at="2024-01-01T00:00:00+00:00",
        index=index.export() if serialize else None,
        lookup=lookup,
        store=store,
    )
