"""Pytest configuration and fixtures."""

import pytest

from src.core.models.document import Candidate
from src.core.services.index_service import IndexService
from src.infrastructure.lexical import ForwardIndex
from tests.helpers import MemoryIndexStore, build_blob


@pytest.fixture
def memory_store():
    return MemoryIndexStore


@pytest.fixture
def make_index_service():
    def _make(chunks: dict[str, tuple[str, str]], serialize: bool = True) -> IndexService:
        store = MemoryIndexStore(blob=build_blob(chunks, serialize=serialize))
        return IndexService(index_store=store, index_factory=ForwardIndex)

    return _make


@pytest.fixture
def make_candidate():
    def _make(
        cid: str = "doc#000",
        doc_id: str = "doc",
        section_id: str = "content",
        text: str = "some text",
        title: str = "Doc",
        score: float = 0.0,
    ) -> Candidate:
        return Candidate(
            id=cid,
            doc_id=doc_id,
            section_id=section_id,
            text=text,
            source_url=f"/docs/{doc_id}",
            title=title,
            score=score,
        )

    return _make
