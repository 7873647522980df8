"""Protocol interfaces for dependency injection."""
from .index_store import IndexStoreProtocol
from .lexical_index import LexicalIndexProtocol
from .llm import AnswerGeneratorProtocol
from .scorer import ScorerProtocol

__all__ = [
    "IndexStoreProtocol",
    "LexicalIndexProtocol",
    "AnswerGeneratorProtocol",
    "ScorerProtocol",
]
