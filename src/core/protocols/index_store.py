"""Index store protocol for dependency injection."""
from typing import Optional, Protocol, runtime_checkable

from ..models.document import IndexBlob, IndexMetadata


@runtime_checkable
class IndexStoreProtocol(Protocol):
    """Protocol for durable index storage."""

    async def load(self) -> IndexBlob:
        """Fetch the persisted index blob.

        Raises:
            IndexLoadError: Storage unavailable or blob malformed.
        """
        ...

    async def save(self, blob: IndexBlob, metadata: IndexMetadata) -> None:
        """Persist blob and metadata; readers see all of it or none of it."""
        ...

    async def load_metadata(self) -> Optional[IndexMetadata]:
        """Fetch the index metadata record, None if never written."""
        ...
