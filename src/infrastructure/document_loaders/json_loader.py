from pathlib import Path

from src.core.models.document import RawDocument


class JsonLoader:
    """Structured data files are indexed as their raw text."""

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() == ".json"

    def load(self, file_path: Path) -> RawDocument:
        return RawDocument(path=file_path, content=file_path.read_text(encoding="utf-8"))
