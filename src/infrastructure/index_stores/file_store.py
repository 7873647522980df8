import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from src.core.errors import IndexLoadError
from src.core.models.document import IndexBlob, IndexMetadata

logger = logging.getLogger(__name__)


class FileIndexStore:
    """Index store on the local filesystem."""

    def __init__(
        self,
        directory: str = "./indexes",
        index_name: str = "primary.json",
        meta_name: str = "meta.json",
    ):
        """Initialize file store.

        Args:
            directory: Folder holding the index files.
            index_name: File name of the index blob.
            meta_name: File name of the metadata record.
        """
        self._directory = Path(directory)
        self._index_path = self._directory / index_name
        self._meta_path = self._directory / meta_name

    @property
    def index_path(self) -> Path:
        return self._index_path

    def _write_atomic(self, path: Path, payload: dict[str, Any]) -> None:
        """Write to a temp file in the same folder, then swap it in."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _read_json(self, path: Path) -> Any:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _load_sync(self) -> IndexBlob:
        logger.info(f"Index load start: {self._index_path}")
        try:
            data = self._read_json(self._index_path)
            blob = IndexBlob.from_dict(data)
        except FileNotFoundError as e:
            raise IndexLoadError(f"Index not found: {self._index_path}") from e
        except (OSError, ValueError) as e:
            raise IndexLoadError(f"Failed to load index {self._index_path}: {e}") from e
        logger.info(f"Index load done: {len(blob.store)} chunks")
        return blob

    def _save_sync(self, blob: IndexBlob, metadata: IndexMetadata) -> None:
        self._write_atomic(self._index_path, blob.to_dict())
        self._write_atomic(self._meta_path, metadata.to_dict())
        logger.info(f"Persisted index to {self._index_path}")

    def _load_metadata_sync(self) -> Optional[IndexMetadata]:
        if not self._meta_path.exists():
            return None
        try:
            return IndexMetadata.from_dict(self._read_json(self._meta_path))
        except (OSError, ValueError, TypeError) as e:
            raise IndexLoadError(f"Failed to load index metadata: {e}") from e

    async def load(self) -> IndexBlob:
        return await asyncio.to_thread(self._load_sync)

    async def save(self, blob: IndexBlob, metadata: IndexMetadata) -> None:
        await asyncio.to_thread(self._save_sync, blob, metadata)

    async def load_metadata(self) -> Optional[IndexMetadata]:
        return await asyncio.to_thread(self._load_metadata_sync)
