import asyncio
import logging
from typing import Optional

import requests

from src.core.errors import IndexLoadError
from src.core.models.document import IndexBlob, IndexMetadata

logger = logging.getLogger(__name__)


class HttpIndexStore:
    """Index store on an HTTP object store (GET/PUT of JSON objects)."""

    def __init__(
        self,
        base_url: str,
        index_key: str = "indexes/primary.json",
        meta_key: str = "indexes/meta.json",
        timeout: float = 10.0,
        headers: Optional[dict[str, str]] = None,
    ):
        """Initialize HTTP store.

        Args:
            base_url: Bucket or object-store base URL.
            index_key: Object key of the index blob.
            meta_key: Object key of the metadata record.
            timeout: Request timeout in seconds.
            headers: Extra request headers (auth).
        """
        self._base_url = base_url.rstrip("/")
        self._index_key = index_key
        self._meta_key = meta_key
        self._timeout = timeout
        self._headers = headers or {}

    def _url(self, key: str) -> str:
        return f"{self._base_url}/{key}"

    def _load_sync(self) -> IndexBlob:
        url = self._url(self._index_key)
        logger.info(f"Index load start: {url}")
        try:
            resp = requests.get(url, headers=self._headers, timeout=self._timeout)
            resp.raise_for_status()
            blob = IndexBlob.from_dict(resp.json())
        except requests.RequestException as e:
            raise IndexLoadError(f"Index store unavailable: {e}") from e
        except ValueError as e:
            raise IndexLoadError(f"Malformed index blob: {e}") from e
        logger.info(f"Index load done: {len(resp.content)} bytes")
        return blob

    def _put(self, key: str, payload: dict) -> None:
        resp = requests.put(
            self._url(key),
            json=payload,
            headers=self._headers,
            timeout=self._timeout,
        )
        resp.raise_for_status()

    def _save_sync(self, blob: IndexBlob, metadata: IndexMetadata) -> None:
        # Single-object PUT is atomic on the store; metadata goes last.
        self._put(self._index_key, blob.to_dict())
        self._put(self._meta_key, metadata.to_dict())
        logger.info(f"Persisted index to {self._url(self._index_key)}")

    def _load_metadata_sync(self) -> Optional[IndexMetadata]:
        try:
            resp = requests.get(
                self._url(self._meta_key), headers=self._headers, timeout=self._timeout
            )
            if resp.status_code == 404:
                return None
            resp.raise_for_status()
            return IndexMetadata.from_dict(resp.json())
        except requests.RequestException as e:
            raise IndexLoadError(f"Index store unavailable: {e}") from e
        except (ValueError, TypeError) as e:
            raise IndexLoadError(f"Malformed index metadata: {e}") from e

    async def load(self) -> IndexBlob:
        return await asyncio.to_thread(self._load_sync)

    async def save(self, blob: IndexBlob, metadata: IndexMetadata) -> None:
        await asyncio.to_thread(self._save_sync, blob, metadata)

    async def load_metadata(self) -> Optional[IndexMetadata]:
        return await asyncio.to_thread(self._load_metadata_sync)
