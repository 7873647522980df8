"""Index store implementations."""
from .file_store import FileIndexStore
from .http_store import HttpIndexStore

__all__ = ["FileIndexStore", "HttpIndexStore"]
