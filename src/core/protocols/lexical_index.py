"""Lexical index protocol for dependency injection."""
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class LexicalIndexProtocol(Protocol):
    """Minimal surface of a token index: build, search, export, import."""

    def add(self, doc_id: str, text: str) -> None:
        """Index text under a document id.

        Args:
            doc_id: Chunk id.
            text: Searchable text.
        """
        ...

    def search(self, query: str, limit: int = 10) -> list[str]:
        """Search ids matching the query.

        Args:
            query: Free-text query.
            limit: Maximum number of ids.

        Returns:
            Matching ids, best first.
        """
        ...

    def export(self) -> dict[str, Any]:
        """Serialize the index to a JSON-compatible dict."""
        ...

    def import_(self, data: dict[str, Any]) -> None:
        """Restore the index from exported data."""
        ...
