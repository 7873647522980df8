"""Core business services."""
from .search_service import SearchService, build_snippet, rerank_candidates
from .chat_service import ChatService
from .router_service import RouterService
from .ingest_service import IngestService, chunk_text, sectionize
from .index_service import IndexService, LoadedIndex
from .prompt_service import build_system_prompt, build_user_prompt, extract_citations
from .tone_service import pick_tone, resolve_tone

__all__ = [
    "SearchService",
    "ChatService",
    "RouterService",
    "IngestService",
    "IndexService",
    "LoadedIndex",
    "build_snippet",
    "rerank_candidates",
    "chunk_text",
    "sectionize",
    "build_system_prompt",
    "build_user_prompt",
    "extract_citations",
    "pick_tone",
    "resolve_tone",
]
