import logging
from pathlib import Path
from typing import Optional

from pypdf.errors import PyPdfError

from src.core.models.document import RawDocument

from .json_loader import JsonLoader
from .markdown_loader import MarkdownLoader
from .pdf_loader import PDFLoader

logger = logging.getLogger(__name__)

# Failures that skip one file instead of aborting the ingest
_LOAD_ERRORS = (OSError, ValueError, PyPdfError)


class CompositeLoader:
    """Routes a file to the first loader that accepts its extension."""

    def __init__(self, loaders: Optional[list] = None):
        self._loaders = loaders if loaders is not None else [MarkdownLoader(), JsonLoader(), PDFLoader()]

    def _pick(self, file_path: Path):
        return next((loader for loader in self._loaders if loader.supports(file_path)), None)

    def supports(self, file_path: Path) -> bool:
        return self._pick(file_path) is not None

    def load(self, file_path: Path) -> Optional[RawDocument]:
        """Load a file, returning None when unsupported or unreadable."""
        loader = self._pick(file_path)
        if loader is None:
            return None
        try:
            return loader.load(file_path)
        except _LOAD_ERRORS as e:
            logger.warning(f"Skipping {file_path}: {e}")
            return None
