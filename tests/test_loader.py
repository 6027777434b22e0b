from __future__ import annotations

import asyncio
import os
from datetime import datetime, timezone
from pathlib import Path

import pytest

from pagesmith.errors import FileSystemError, MetadataError
from pagesmith.loader import SourceLoader
from pagesmith.metadata import ExtractedMetadata, FrontmatterExtractor


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_all_builds_documents_in_listing_order(tmp_path: Path, caplog) -> None:
    caplog.set_level("INFO")
    pages = tmp_path / "pages"
    pages.mkdir()
    started = _write(pages / "Getting-Started.md", "---\ndescription: intro\n---\n# Start\n")
    _write(pages / "FAQ.md", "# Questions\n")
    modified = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    os.utime(started, (modified.timestamp(), modified.timestamp()))

    documents = asyncio.run(SourceLoader(FrontmatterExtractor()).load_all(pages))

    assert [document.origin for document in documents] == ["FAQ.md", "Getting-Started.md"]
    faq, getting_started = documents
    assert faq.slug == "faq"
    assert faq.title == "FAQ"
    assert faq.body == "# Questions"
    assert getting_started.slug == "getting-started"
    assert getting_started.title == "Getting Started"
    assert getting_started.metadata == {"description": "intro"}
    assert getting_started.modified_at == modified
    assert any("2 件のページ" in record.message for record in caplog.records)


def test_load_all_skips_directories(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    (pages / "drafts").mkdir(parents=True)
    _write(pages / "one.md", "one")

    documents = asyncio.run(SourceLoader(FrontmatterExtractor()).load_all(pages))

    assert [document.slug for document in documents] == ["one"]


def test_load_all_decodes_non_utf8_sources(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    pages.mkdir()
    (pages / "legacy.md").write_bytes("Café crème brûlée, déjà vu à la carte.\n".encode("latin-1") * 4)

    documents = asyncio.run(SourceLoader(FrontmatterExtractor()).load_all(pages))

    assert documents[0].body.startswith("Caf")
    assert "vu" in documents[0].body


def test_listing_failure_raises_file_system_error(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    with pytest.raises(FileSystemError) as exc:
        asyncio.run(SourceLoader(FrontmatterExtractor()).load_all(missing))

    assert exc.value.operation == "list"
    assert exc.value.path == missing


def test_metadata_error_names_the_failing_document(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    pages.mkdir()
    _write(pages / "good.md", "---\ntitle: ok\n---\nbody")
    _write(pages / "bad.md", "---\ntitle: [unclosed\n---\nbody")

    with pytest.raises(MetadataError) as exc:
        asyncio.run(SourceLoader(FrontmatterExtractor()).load_all(pages))

    assert exc.value.origin == "bad.md"
    assert "bad.md" in str(exc.value)


def test_documents_are_immutable(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    pages.mkdir()
    _write(pages / "doc.md", "---\nkey: value\n---\nbody")

    document = asyncio.run(SourceLoader(FrontmatterExtractor()).load_all(pages))[0]

    with pytest.raises(AttributeError):
        document.slug = "other"  # type: ignore[misc]
    with pytest.raises(TypeError):
        document.metadata["key"] = "changed"  # type: ignore[index]


def test_loader_uses_injected_extractor(tmp_path: Path) -> None:
    pages = tmp_path / "pages"
    pages.mkdir()
    _write(pages / "doc.txt", "RAW")

    class UpperExtractor:
        def extract(self, raw_text: str) -> ExtractedMetadata:
            return ExtractedMetadata(body=raw_text.lower(), metadata={"kind": "custom"})

    documents = asyncio.run(SourceLoader(UpperExtractor(), max_workers=1).load_all(pages))

    assert documents[0].body == "raw"
    assert documents[0].metadata == {"kind": "custom"}
