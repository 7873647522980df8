"""Document domain models."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class SectionType(Enum):
    """Semantic type of a document section, inferred from its header."""
    CONTEXT = "context"
    CONSTRAINTS = "constraints"
    PROCESS = "process"
    DECISIONS = "decisions"
    OUTCOMES = "outcomes"
    ARTIFACTS = "artifacts"
    LEARNINGS = "learnings"


@dataclass
class Section:
    """Header-delimited part of a document."""
    id: str
    type: SectionType
    title: str
    text: str
    url: str


@dataclass
class Document:
    """Source unit for ingestion (project write-up, resume, data file)."""
    id: str
    title: str
    url: str
    text: str
    topics: list[str] = field(default_factory=list)
    year: Optional[int] = None
    sections: list[Section] = field(default_factory=list)


@dataclass
class Chunk:
    """Document chunk for indexing."""
    id: str
    text: str
    source_id: str
    section_id: str
    title: str
    url: str
    topics: list[str] = field(default_factory=list)
    year: Optional[int] = None

    def to_record(self) -> dict[str, Any]:
        """Raw chunk record as persisted in the index blob."""
        meta: dict[str, Any] = {
            "sourceId": self.source_id,
            "sectionId": self.section_id,
            "topic": list(self.topics),
        }
        if self.year is not None:
            meta["year"] = self.year
        return {"id": self.id, "text": self.text, "meta": meta}


@dataclass
class ChunkRecord:
    """Chunk as seen through the lookup and store side tables."""
    id: str
    title: str
    url: str
    text: str
    source_id: str
    section_id: str
    preview: str = ""


@dataclass
class Candidate:
    """Per-query retrieval candidate."""
    id: str
    doc_id: str
    section_id: str
    text: str
    source_url: str
    title: str
    score: float = 0.0


@dataclass
class ContextEntry:
    """Ranked snippet handed to prompt assembly."""
    title: str
    source_url: str
    snippet: str


@dataclass
class Citation:
    """Reference from a bracketed answer marker to its context entry."""
    title: str
    source_url: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "sourceUrl": self.source_url}


@dataclass
class IndexMetadata:
    """Summary record written after every successful ingestion."""
    version: int
    last_indexed_at: str
    chunk_count: int
    source_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "lastIndexedAt": self.last_indexed_at,
            "chunkCount": self.chunk_count,
            "sourceCount": self.source_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IndexMetadata":
        return cls(
            version=int(data.get("version", 0)),
            last_indexed_at=str(data.get("lastIndexedAt", "")),
            chunk_count=int(data.get("chunkCount", 0)),
            source_count=int(data.get("sourceCount", 0)),
        )


@dataclass
class IndexBlob:
    """Persisted index artifact: serialized token index plus side tables."""
    version: int
    created_at: str
    index: Optional[dict[str, Any]]
    lookup: dict[str, dict[str, Any]]
    store: dict[str, str]
    chunks: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "createdAt": self.created_at,
            "index": self.index,
            "lookup": self.lookup,
            "store": self.store,
            "chunks": self.chunks,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IndexBlob":
        """Parse a decoded blob.

        Raises:
            ValueError: If the payload is not a blob object.
        """
        if not isinstance(data, dict):
            raise ValueError("Index blob must be a JSON object")
        lookup = data.get("lookup") or {}
        store = data.get("store") or {}
        if not isinstance(lookup, dict) or not isinstance(store, dict):
            raise ValueError("Index blob side tables must be objects")
        return cls(
            version=int(data.get("version", 0)),
            created_at=str(data.get("createdAt", "")),
            index=data.get("index"),
            lookup=lookup,
            store=store,
            chunks=list(data.get("chunks") or []),
        )


@dataclass
class SearchResponse:
    """Search response for the chat pipeline."""
    candidates: list[Candidate]
    context: list[ContextEntry]
    sources: list[str]


@dataclass
class RawDocument:
    """Loaded file content before sanitizing."""
    path: Path
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
