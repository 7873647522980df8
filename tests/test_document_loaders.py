"""Tests for content file loaders."""

from unittest.mock import patch

from src.infrastructure.document_loaders import CompositeLoader, MarkdownLoader, split_frontmatter


class TestSplitFrontmatter:
    def test_parses_yaml_block(self):
        meta, body = split_frontmatter("---\ntitle: CNS\nyear: 2023\n---\nBody text")
        assert meta == {"title": "CNS", "year": 2023}
        assert body == "Body text"

    def test_without_frontmatter(self):
        assert split_frontmatter("Just body") == ({}, "Just body")

    def test_invalid_yaml_kept_as_body(self):
        raw = "---\ntitle: [unclosed\n---\nBody"
        assert split_frontmatter(raw) == ({}, raw)

    def test_non_mapping_frontmatter_ignored(self):
        meta, body = split_frontmatter("---\n- a\n- b\n---\nBody")
        assert meta == {}
        assert body == "Body"


def test_markdown_loader(tmp_path):
    path = tmp_path / "cns.mdx"
    path.write_text("---\nslug: project-cns\n---\n## Context\nText", encoding="utf-8")

    doc = MarkdownLoader().load(path)

    assert doc.metadata == {"slug": "project-cns"}
    assert doc.content == "## Context\nText"
    assert doc.path == path


class TestCompositeLoader:
    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "notes.docx"
        path.write_bytes(b"binary")
        loader = CompositeLoader()

        assert not loader.supports(path)
        assert loader.load(path) is None

    def test_json_loaded_as_text(self, tmp_path):
        path = tmp_path / "kpi.json"
        path.write_text('{"users": 1200}', encoding="utf-8")

        doc = CompositeLoader().load(path)

        assert doc.content == '{"users": 1200}'
        assert doc.metadata == {}

    def test_unreadable_file_returns_none(self, tmp_path):
        path = tmp_path / "broken.md"
        path.write_text("text", encoding="utf-8")

        with patch.object(MarkdownLoader, "load", side_effect=UnicodeDecodeError("utf-8", b"", 0, 1, "bad")):
            assert CompositeLoader().load(path) is None
