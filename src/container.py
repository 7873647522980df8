import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Container:
    """Type-keyed registry of factories with optional per-process singletons."""
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _instances: dict[type, Any] = field(default_factory=dict)
    _shared: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register (or replace) the factory for an interface.

        Args:
            interface: Protocol or concrete type used as the key.
            factory: Zero-argument callable building the instance.
            singleton: Build once and reuse.
        """
        self._factories[interface] = factory
        self._instances.pop(interface, None)
        if singleton:
            self._shared.add(interface)
        else:
            self._shared.discard(interface)

    def override(self, interface: type[T], instance: T) -> None:
        """Pin a ready-made instance, e.g. a test double."""
        self._factories[interface] = lambda: instance
        self._instances[interface] = instance
        self._shared.add(interface)

    def is_registered(self, interface: type) -> bool:
        return interface in self._factories

    def resolve(self, interface: type[T]) -> T:
        if interface in self._instances:
            return self._instances[interface]

        factory = self._factories.get(interface)
        if factory is None:
            raise KeyError(f"No factory registered for {interface.__name__}")

        instance = factory()
        if interface in self._shared:
            self._instances[interface] = instance
        return instance

    def reset(self) -> None:
        """Drop built singletons; registrations stay."""
        self._instances.clear()


container = Container()


def configure_container(settings: Settings) -> Container:
    """Configure container with all dependencies.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .core.protocols.index_store import IndexStoreProtocol
    from .core.protocols.lexical_index import LexicalIndexProtocol
    from .core.protocols.llm import AnswerGeneratorProtocol
    from .core.protocols.scorer import ScorerProtocol
    from .core.services.chat_service import ChatService
    from .core.services.index_service import IndexService
    from .core.services.ingest_service import IngestService
    from .core.services.router_service import RouterService
    from .core.services.search_service import SearchService
    from .core.strategies import HeuristicScorer, QueryExpansionStrategy
    from .infrastructure.index_stores import FileIndexStore, HttpIndexStore
    from .infrastructure.lexical import ForwardIndex
    from .infrastructure.llm.ollama_client import OllamaClient

    def build_index_store() -> IndexStoreProtocol:
        if settings.index_backend == "http":
            if not settings.index_base_url:
                raise ValueError("index_base_url is required for the http index backend")
            return HttpIndexStore(
                base_url=settings.index_base_url,
                timeout=settings.index_timeout,
            )
        if settings.index_backend != "file":
            raise ValueError(f"Unknown index backend: {settings.index_backend}")
        return FileIndexStore(directory=settings.index_path)

    def build_scorer() -> ScorerProtocol:
        if settings.rag_scorer == "cross_encoder":
            # Model load is slow; only pay for it when selected
            from .infrastructure.rerankers.cross_encoder import CrossEncoderScorer

            return CrossEncoderScorer(settings.reranker_model)
        return HeuristicScorer()

    container.register(IndexStoreProtocol, build_index_store, singleton=True)

    # Fresh index per build/load
    container.register(LexicalIndexProtocol, ForwardIndex)

    container.register(ScorerProtocol, build_scorer, singleton=True)

    container.register(
        AnswerGeneratorProtocol,
        lambda: OllamaClient(
            base_url=settings.llm_base_url,
            model=settings.llm_model,
            api_key=settings.llm_api_key,
        ),
        singleton=True,
    )

    container.register(
        IndexService,
        lambda: IndexService(
            index_store=container.resolve(IndexStoreProtocol),
            index_factory=lambda: container.resolve(LexicalIndexProtocol),
            cache=settings.index_cache,
        ),
        singleton=True,
    )

    container.register(
        SearchService,
        lambda: SearchService(
            index_service=container.resolve(IndexService),
            scorer=container.resolve(ScorerProtocol),
            query_expansion=QueryExpansionStrategy(),
            top_k=settings.rag_top_k,
            max_snippets=settings.rag_max_snippets,
            snippet_length=settings.rag_snippet_length,
            scope_mode=settings.rag_scope_mode,
        ),
        singleton=True,
    )

    container.register(
        RouterService,
        lambda: RouterService(
            config_path=settings.router_config_path,
            debug=settings.router_debug,
        ),
        singleton=True,
    )

    container.register(
        ChatService,
        lambda: ChatService(
            generator=container.resolve(AnswerGeneratorProtocol),
            search_service=container.resolve(SearchService),
            router=container.resolve(RouterService),
            allow_personal=settings.allow_personal,
            allow_no_context=settings.rag_allow_no_context,
            contact_url=settings.contact_url,
            max_tokens=settings.llm_max_tokens,
            personal_max_tokens=settings.llm_personal_max_tokens,
            temperature=settings.llm_temperature,
            top_p=settings.llm_top_p,
        ),
        singleton=True,
    )

    container.register(
        IngestService,
        lambda: IngestService(
            index_store=container.resolve(IndexStoreProtocol),
            index_factory=lambda: container.resolve(LexicalIndexProtocol),
            content_path=settings.content_path,
            resume_pdf_path=settings.resume_pdf_path,
            boosts_path=settings.boosts_path,
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
        ),
        singleton=True,
    )

    logger.info("Container configured")
    return container
