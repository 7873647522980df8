import logging
import re
from pathlib import Path

import yaml

from src.core.models.document import RawDocument

logger = logging.getLogger(__name__)

_FRONTMATTER_RE = re.compile(r"\A---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.DOTALL)


def split_frontmatter(raw: str) -> tuple[dict, str]:
    """Split a leading YAML frontmatter block from the body."""
    match = _FRONTMATTER_RE.match(raw)
    if not match:
        return {}, raw

    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        logger.warning(f"Invalid frontmatter, treating as body: {e}")
        return {}, raw

    if not isinstance(data, dict):
        return {}, raw[match.end():]
    return data, raw[match.end():]


class MarkdownLoader:

    EXTENSIONS = {".md", ".mdx", ".markdown"}

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.EXTENSIONS

    def load(self, file_path: Path) -> RawDocument:
        raw = file_path.read_text(encoding="utf-8")
        metadata, body = split_frontmatter(raw)
        return RawDocument(path=file_path, content=body, metadata=metadata)
