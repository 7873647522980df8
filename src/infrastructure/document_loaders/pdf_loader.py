import logging
from pathlib import Path

from pypdf import PdfReader

from src.core.models.document import RawDocument

logger = logging.getLogger(__name__)


class PDFLoader:
    """Extracts the text layer of a PDF, one paragraph block per page."""

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() == ".pdf"

    def load(self, file_path: Path) -> RawDocument:
        reader = PdfReader(file_path)
        pages = [(page.extract_text() or "").strip() for page in reader.pages]
        pages = [text for text in pages if text]
        if not pages:
            logger.warning(f"No text layer in {file_path}")
        return RawDocument(path=file_path, content="\n\n".join(pages))
