"""Domain models."""
from .document import (
    Candidate,
    Chunk,
    ChunkRecord,
    Citation,
    ContextEntry,
    Document,
    IndexBlob,
    IndexMetadata,
    RawDocument,
    SearchResponse,
    Section,
    SectionType,
)
from .chat import ChatEvent, ChatHistory, ChatMessage, Route, Tone

__all__ = [
    "Candidate",
    "Chunk",
    "ChunkRecord",
    "Citation",
    "ContextEntry",
    "Document",
    "IndexBlob",
    "IndexMetadata",
    "RawDocument",
    "SearchResponse",
    "Section",
    "SectionType",
    "ChatEvent",
    "ChatHistory",
    "ChatMessage",
    "Route",
    "Tone",
]
