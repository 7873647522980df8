"""Tests for dependency wiring."""

import pytest

from src.config.settings import Settings
from src.container import container, configure_container
from src.core.protocols.index_store import IndexStoreProtocol
from src.core.protocols.lexical_index import LexicalIndexProtocol
from src.core.protocols.scorer import ScorerProtocol
from src.core.services.chat_service import ChatService
from src.core.services.ingest_service import IngestService
from src.core.services.search_service import SearchService
from src.core.strategies import HeuristicScorer
from src.infrastructure.index_stores import FileIndexStore, HttpIndexStore


@pytest.fixture
def settings(tmp_path):
    container.reset()
    yield Settings(
        _env_file=None,
        index_path=str(tmp_path / "indexes"),
        content_path=str(tmp_path / "content"),
        router_config_path=str(tmp_path / "router_config.json"),
        boosts_path=str(tmp_path / "boosts.json"),
    )
    container.reset()


def test_resolves_pipeline(settings):
    configure_container(settings)

    chat = container.resolve(ChatService)

    assert chat is container.resolve(ChatService)
    assert isinstance(container.resolve(IndexStoreProtocol), FileIndexStore)
    assert isinstance(container.resolve(ScorerProtocol), HeuristicScorer)
    assert isinstance(container.resolve(SearchService), SearchService)
    assert isinstance(container.resolve(IngestService), IngestService)


def test_lexical_index_is_fresh_per_resolve(settings):
    configure_container(settings)

    assert container.resolve(LexicalIndexProtocol) is not container.resolve(LexicalIndexProtocol)


def test_http_backend(settings):
    settings.index_backend = "http"
    settings.index_base_url = "https://bucket.example.com"
    configure_container(settings)

    assert isinstance(container.resolve(IndexStoreProtocol), HttpIndexStore)


def test_http_backend_requires_url(settings):
    settings.index_backend = "http"
    configure_container(settings)

    with pytest.raises(ValueError):
        container.resolve(IndexStoreProtocol)


def test_override_pins_test_double(settings):
    from src.core.protocols.llm import AnswerGeneratorProtocol

    configure_container(settings)
    fake = object()
    container.override(AnswerGeneratorProtocol, fake)

    assert container.resolve(AnswerGeneratorProtocol) is fake
    assert container.is_registered(AnswerGeneratorProtocol)
    # Registering again replaces the pinned instance
    configure_container(settings)
    assert container.resolve(AnswerGeneratorProtocol) is not fake
