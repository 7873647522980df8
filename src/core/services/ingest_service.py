"""Ingest service - document chunking and lexical index build."""

import json
import logging
import re
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from ..errors import NoDocumentsFound
from ..models.document import (
    Chunk,
    Document,
    IndexBlob,
    IndexMetadata,
    RawDocument,
    Section,
    SectionType,
)
from ..protocols.index_store import IndexStoreProtocol
from ..protocols.lexical_index import LexicalIndexProtocol

logger = logging.getLogger(__name__)

BLOB_VERSION = 2
PREVIEW_LENGTH = 300

# (directory under content root, url template, document id prefix)
DOCUMENT_SOURCES: list[tuple[str, str, str]] = [
    ("projects", "/projects/{slug}", "project-"),
    ("resume", "/about", ""),
    ("teaching", "/teaching", ""),
    ("interviews", "/about", ""),
]
DATA_DIR = "data"
DATA_URL = "/about"

_CODE_FENCE_RE = re.compile(r"```.*?```", re.DOTALL)
_HTML_TAG_RE = re.compile(r"<[^>]+>")
_MD_LINK_RE = re.compile(r"\[(.*?)\]\((.*?)\)")
_WHITESPACE_RE = re.compile(r"\s+")
_HEADER_RE = re.compile(r"^(#{2,3})\s+(.+)$")
_YEAR_RE = re.compile(r"(20\d{2}|19\d{2})")

# First matching rule wins; anything else is context.
_SECTION_RULES: list[tuple[tuple[str, ...], SectionType]] = [
    (("context", "problem", "background"), SectionType.CONTEXT),
    (("constraint",), SectionType.CONSTRAINTS),
    (("process", "approach", "method"), SectionType.PROCESS),
    (("decision",), SectionType.DECISIONS),
    (("outcome", "result", "metric"), SectionType.OUTCOMES),
    (("artifact", "code", "demo"), SectionType.ARTIFACTS),
    (("learning", "takeaway"), SectionType.LEARNINGS),
]


def sanitize_text(text: str) -> str:
    """Strip code fences, HTML and link targets, collapse whitespace."""
    text = _CODE_FENCE_RE.sub(" ", text or "")
    text = _HTML_TAG_RE.sub(" ", text)
    text = _MD_LINK_RE.sub(r"\1", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def chunk_text(text: str, size: int, overlap: int) -> list[str]:
    """Split text into overlapping fixed-size windows.

    Consecutive windows overlap by ``overlap`` characters and the last
    window ends exactly at the end of the text.

    Args:
        text: Text to chunk.
        size: Window size in characters.
        overlap: Characters shared with the next window.

    Returns:
        Non-empty, trimmed chunk texts.
    """
    if not 0 <= overlap < size:
        raise ValueError(f"Invalid chunking: size={size}, overlap={overlap}")

    chunks: list[str] = []
    offset = 0
    while offset < len(text):
        end = min(offset + size, len(text))
        piece = text[offset:end].strip()
        if piece:
            chunks.append(piece)
        if end == len(text):
            break
        offset = end - overlap
    return chunks


def derive_year(raw: str) -> Optional[int]:
    """First 19xx/20xx year found in the string."""
    match = _YEAR_RE.search(raw or "")
    return int(match.group(0)) if match else None


def infer_section_type(title: str) -> SectionType:
    lower = title.lower()
    for keywords, section_type in _SECTION_RULES:
        if any(k in lower for k in keywords):
            return section_type
    return SectionType.CONTEXT


def sectionize(content: str, url: str) -> list[Section]:
    """Split markdown content on ##/### headers.

    Text before the first header becomes an ``intro`` section. Content
    without any header is a single ``content`` section.
    """
    raw_sections: list[tuple[str, SectionType, str, list[str]]] = []
    current: tuple[str, SectionType, str, list[str]] = (
        "intro", SectionType.CONTEXT, "Introduction", []
    )
    header_count = 0

    for line in content.splitlines():
        match = _HEADER_RE.match(line)
        if match:
            raw_sections.append(current)
            header_count += 1
            title = match.group(2).strip()
            current = (f"section-{header_count}", infer_section_type(title), title, [])
        else:
            current[3].append(line)
    raw_sections.append(current)

    if header_count == 0:
        text = sanitize_text(content)
        if not text:
            return []
        return [Section(id="content", type=SectionType.CONTEXT, title="Content", text=text, url=url)]

    sections = []
    for section_id, section_type, title, lines in raw_sections:
        text = sanitize_text("\n".join(lines))
        if not text:
            continue
        sections.append(
            Section(
                id=section_id,
                type=section_type,
                title=title,
                text=text,
                url=f"{url}#{section_id}",
            )
        )
    return sections


class IngestService:
    """Service for building the lexical index from content files."""

    def __init__(
        self,
        index_store: IndexStoreProtocol,
        index_factory: Callable[[], LexicalIndexProtocol],
        content_path: str = "./content",
        resume_pdf_path: Optional[str] = None,
        boosts_path: Optional[str] = None,
        chunk_size: int = 1100,
        chunk_overlap: int = 180,
    ):
        """Initialize ingest service.

        Args:
            index_store: Durable storage for the built index.
            index_factory: Creates an empty lexical index.
            content_path: Root folder with projects/, resume/, teaching/, data/.
            resume_pdf_path: Optional PDF resume to index.
            boosts_path: JSON map of document id to boost phrases.
            chunk_size: Chunk window in characters.
            chunk_overlap: Overlap between consecutive chunks.
        """
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError(
                f"chunk_overlap must be in [0, chunk_size): {chunk_overlap}/{chunk_size}"
            )
        self._store = index_store
        self._index_factory = index_factory
        self._content_path = Path(content_path)
        self._resume_pdf_path = Path(resume_pdf_path) if resume_pdf_path else None
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        self._boosts = self._load_boosts(boosts_path)

        self._loader = None

    @property
    def loader(self):
        """Lazy load document loader."""
        if self._loader is None:
            from src.infrastructure.document_loaders import CompositeLoader

            self._loader = CompositeLoader()
        return self._loader

    def _load_boosts(self, path: Optional[str]) -> dict[str, list[str]]:
        if not path:
            return {}
        boosts_file = Path(path)
        if not boosts_file.exists():
            logger.warning(f"Boosts file {path} not found, indexing without boosts")
            return {}

        with open(boosts_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        return {str(k): [str(p) for p in v] for k, v in data.items()}

    def _document_from_markdown(
        self, raw: RawDocument, url_template: str, default_topic: str, id_prefix: str = ""
    ) -> Optional[Document]:
        meta = raw.metadata
        slug = str(meta.get("slug") or raw.path.stem)
        title = str(meta.get("title") or slug)
        url = url_template.format(slug=slug)

        if isinstance(meta.get("topics"), list):
            topics = [str(t) for t in meta["topics"]]
        elif meta.get("topic"):
            topics = [str(meta["topic"])]
        else:
            topics = [default_topic]

        year = meta.get("year")
        if not isinstance(year, int) or isinstance(year, bool):
            year = derive_year(slug)

        text = sanitize_text(raw.content)
        if not text:
            return None

        return Document(
            id=f"{id_prefix}{slug}",
            title=title,
            url=url,
            text=text,
            topics=topics,
            year=year,
            sections=sectionize(raw.content, url),
        )

    def _document_from_text(self, raw: RawDocument, doc_id: str, title: str, url: str, topics: list[str]) -> Optional[Document]:
        text = sanitize_text(raw.content)
        if not text:
            return None
        return Document(
            id=doc_id,
            title=title,
            url=url,
            text=text,
            topics=topics,
            year=derive_year(doc_id),
            sections=sectionize(raw.content, url),
        )

    def collect_documents(self) -> list[Document]:
        """Read every supported content file into a Document."""
        documents: list[Document] = []

        for dir_name, url_template, id_prefix in DOCUMENT_SOURCES:
            dir_path = self._content_path / dir_name
            if not dir_path.is_dir():
                logger.warning(f"Skipping {dir_path}: not found")
                continue
            for file_path in sorted(dir_path.iterdir()):
                if file_path.suffix.lower() not in {".md", ".mdx"}:
                    continue
                raw = self.loader.load(file_path)
                if raw is None:
                    continue
                doc = self._document_from_markdown(raw, url_template, dir_name, id_prefix)
                if doc:
                    documents.append(doc)

        data_path = self._content_path / DATA_DIR
        if data_path.is_dir():
            for file_path in sorted(data_path.glob("*.json")):
                raw = self.loader.load(file_path)
                if raw is None:
                    continue
                doc_id = file_path.stem
                title = re.sub(r"[_-]", " ", doc_id)
                doc = self._document_from_text(raw, doc_id, title, DATA_URL, ["data"])
                if doc:
                    documents.append(doc)
        else:
            logger.warning(f"Skipping {data_path}: not found")

        if self._resume_pdf_path and self._resume_pdf_path.exists():
            raw = self.loader.load(self._resume_pdf_path)
            if raw is not None:
                doc = self._document_from_text(raw, "resume-pdf", "Resume (PDF)", "/about", ["resume"])
                if doc:
                    documents.append(doc)

        logger.info(f"Collected {len(documents)} documents from {self._content_path}")
        return documents

    def build_chunks(self, documents: list[Document]) -> list[Chunk]:
        """Chunk every section of every document.

        Chunk ids are ``<document id>#<ordinal>`` with a per-document,
        zero-padded ordinal.
        """
        chunks: list[Chunk] = []
        for doc in documents:
            sections = doc.sections or [
                Section(id="content", type=SectionType.CONTEXT, title="Content", text=doc.text, url=doc.url)
            ]
            ordinal = 0
            for section in sections:
                for piece in chunk_text(section.text, self._chunk_size, self._chunk_overlap):
                    chunks.append(
                        Chunk(
                            id=f"{doc.id}#{ordinal:03d}",
                            text=piece,
                            source_id=doc.id,
                            section_id=section.id,
                            title=doc.title,
                            url=section.url,
                            topics=list(doc.topics),
                            year=doc.year,
                        )
                    )
                    ordinal += 1
        return chunks

    def build_index(self, documents: list[Document]) -> IndexBlob:
        """Build the serialized index and its side tables.

        Raises:
            NoDocumentsFound: If there is nothing to index.
        """
        if not documents:
            raise NoDocumentsFound("No documents found for ingestion")

        chunks = self.build_chunks(documents)
        index = self._index_factory()
        lookup: dict[str, dict] = {}
        store: dict[str, str] = {}

        for chunk in chunks:
            searchable = f"{chunk.title} {chunk.text}"
            boosts = self._boosts.get(chunk.source_id)
            if boosts:
                searchable = f"{searchable} {' '.join(boosts)}"
            index.add(chunk.id, searchable)

            lookup[chunk.id] = {
                "title": chunk.title,
                "url": chunk.url,
                "preview": chunk.text[:PREVIEW_LENGTH],
                "sourceId": chunk.source_id,
                "sectionId": chunk.section_id,
            }
            store[chunk.id] = chunk.text

        return IndexBlob(
            version=BLOB_VERSION,
            created_at=datetime.now(timezone.utc).isoformat(),
            index=index.export(),
            lookup=lookup,
            store=store,
            chunks=[c.to_record() for c in chunks],
        )

    async def run(self) -> IndexMetadata:
        """Rebuild and persist the whole index.

        Returns:
            Metadata record of the new index.

        Raises:
            NoDocumentsFound: If there is nothing to index; nothing is written.
        """
        documents = self.collect_documents()
        blob = self.build_index(documents)

        metadata = IndexMetadata(
            version=int(time.time() * 1000),
            last_indexed_at=blob.created_at,
            chunk_count=len(blob.store),
            source_count=len(documents),
        )
        await self._store.save(blob, metadata)

        logger.info(
            f"Indexing complete: {metadata.chunk_count} chunks from {metadata.source_count} documents"
        )
        return metadata
