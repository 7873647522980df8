"""Document loader implementations."""
from .markdown_loader import MarkdownLoader, split_frontmatter
from .json_loader import JsonLoader
from .pdf_loader import PDFLoader
from .composite_loader import CompositeLoader

__all__ = [
    "MarkdownLoader",
    "JsonLoader",
    "PDFLoader",
    "CompositeLoader",
    "split_frontmatter",
]
