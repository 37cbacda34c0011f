"""Tests for loading documentation stores."""

import logging
import sqlite3
import struct
import zlib
from pathlib import Path
from unittest.mock import patch

import pytest

from qt_documentation.store import (
    ArchiveError,
    DocumentationStore,
    QchArchive,
    load_documentation,
)


def compress_page(markup: str) -> bytes:
    """Compress a page the way Qt help archives store it.

    Args:
        markup: Page markup.

    Returns:
        Length header followed by zlib data.
    """
    data = markup.encode("utf-8")
    return struct.pack(">I", len(data)) + zlib.compress(data)


def write_qch(archive_path: Path, entries: dict[str, bytes]) -> Path:
    """Create a minimal Qt compressed help archive.

    Args:
        archive_path: Path of the archive to create.
        entries: Stored file names mapped to raw ``Data`` blobs.

    Returns:
        Path to the archive.
    """
    conn = sqlite3.connect(archive_path)
    try:
        conn.executescript("""
            CREATE TABLE FileNameTable (FolderId INTEGER, Name TEXT, FileId INTEGER, Title TEXT);
            CREATE TABLE FileDataTable (Id INTEGER PRIMARY KEY, Data BLOB);
        """)
        for file_id, (name, blob) in enumerate(entries.items(), start=1):
            conn.execute("INSERT INTO FileDataTable (Id, Data) VALUES (?, ?)", (file_id, blob))
            conn.execute(
                "INSERT INTO FileNameTable (FolderId, Name, FileId, Title) VALUES (1, ?, ?, ?)",
                (name, file_id, name),
            )
        conn.commit()
    finally:
        conn.close()
    return archive_path


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    """Create a temporary documentation root.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        Path to the documentation root.
    """
    docs = tmp_path / "doc"
    docs.mkdir()
    return docs


def test_load_from_qch(docs_dir: Path) -> None:
    """Test loading stripped pages from a help archive."""
    write_qch(
        docs_dir / "qtcore.qch",
        {
            "qobject.html": compress_page("<p>The QObject class &amp; friends.</p>"),
            "style/offline.css": compress_page("body {}"),
        },
    )

    store = load_documentation(docs_dir, "Core")

    assert list(store) == ["qobject.html"]
    assert store["qobject.html"] == "The QObject class & friends."


def test_load_from_html_directory(docs_dir: Path) -> None:
    """Test the HTML tree fallback."""
    html_dir = docs_dir / "qtwidgets"
    html_dir.mkdir()
    (html_dir / "qwidget.html").write_text("<p>Path C:\\Qt</p>\r\n<p>Second</p>", encoding="utf-8")
    (html_dir / "notes.txt").write_text("ignored", encoding="utf-8")

    store = load_documentation(docs_dir, "Widgets")

    assert len(store) == 1
    assert store["qwidget.html"] == "Path C:\\\\Qt\nSecond"


def test_empty_archive_falls_back_to_html(docs_dir: Path) -> None:
    """Test that an archive without pages does not hide the HTML tree."""
    write_qch(docs_dir / "qtgui.qch", {"style.css": compress_page("body {}")})
    html_dir = docs_dir / "qtgui"
    html_dir.mkdir()
    (html_dir / "qcolor.html").write_text("<p>Colors</p>", encoding="utf-8")

    store = load_documentation(docs_dir, "Gui")

    assert dict(store) == {"qcolor.html": "Colors"}


def test_missing_root(tmp_path: Path) -> None:
    """Test that a missing documentation root gives an empty store."""
    store = load_documentation(tmp_path / "missing", "Core")

    assert len(store) == 0


def test_missing_module(docs_dir: Path) -> None:
    """Test that a module without archive or pages gives an empty store."""
    assert len(load_documentation(docs_dir, "Core")) == 0


def test_corrupt_archive(docs_dir: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Test that an unreadable archive is logged and gives an empty store."""
    (docs_dir / "qtcore.qch").write_bytes(b"this is not a database" * 10)

    with caplog.at_level(logging.ERROR):
        store = load_documentation(docs_dir, "Core")

    assert len(store) == 0
    assert "Documentation loading failed" in caplog.text


def test_truncated_entry(docs_dir: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Test that an entry shorter than its header degrades to an empty store."""
    write_qch(docs_dir / "qtcore.qch", {"qobject.html": b"\x00"})

    with caplog.at_level(logging.ERROR):
        store = load_documentation(docs_dir, "Core")

    assert len(store) == 0
    assert "Archive entry too short" in caplog.text


def test_decompress() -> None:
    """Test decoding a single archive payload."""
    assert QchArchive.decompress(compress_page("<b>x</b>")) == "<b>x</b>"

    with pytest.raises(ArchiveError):
        QchArchive.decompress(b"\x00\x01")


def test_store_is_read_only() -> None:
    """Test that the store cannot be modified."""
    pages = {"qobject.html": "QObject"}
    store = DocumentationStore(pages)
    pages["qwidget.html"] = "QWidget"

    assert "qwidget.html" not in store
    assert store.get("qobject.html") == "QObject"
    with pytest.raises(TypeError):
        store["qwidget.html"] = "QWidget"  # type: ignore[index]


def test_unreadable_html_directory(docs_dir: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Test that a read error in the HTML tree gives an empty store."""
    with (
        patch("qt_documentation.store.load_from_html", side_effect=PermissionError("denied")) as mock_load,
        caplog.at_level(logging.ERROR),
    ):
        store = load_documentation(docs_dir, "Core")

    mock_load.assert_called_once_with(docs_dir, "Core")
    assert len(store) == 0
    assert "denied" in caplog.text
