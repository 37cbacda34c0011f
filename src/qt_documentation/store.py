"""Loading of Qt documentation pages from compressed help archives or HTML trees."""

import logging
import sqlite3
import zlib
from collections.abc import Generator, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from types import MappingProxyType

from qt_documentation.markup import strip_tags

logger = logging.getLogger(__name__)


class ArchiveError(Exception):
    """Raised when a help archive entry cannot be decoded."""


class DocumentationStore(Mapping[str, str]):
    """Read-only mapping from page file name to stripped page text."""

    def __init__(self, pages: Mapping[str, str] | None = None) -> None:
        """Initialise store with the given pages.

        Args:
            pages: Page file names mapped to plain text.
        """
        self._pages = MappingProxyType(dict(pages or {}))

    def __getitem__(self, key: str) -> str:
        """Return the text of a page.

        Args:
            key: Page file name.

        Returns:
            Stripped page text.

        Raises:
            KeyError: If the page is not in the store.
        """
        return self._pages[key]

    def __iter__(self) -> Iterator[str]:
        """Iterate over page file names."""
        return iter(self._pages)

    def __len__(self) -> int:
        """Return the number of pages."""
        return len(self._pages)

    def __repr__(self) -> str:
        """Return a summary with the page count."""
        return f"DocumentationStore({len(self)} pages)"


class QchArchive:
    """Reads HTML pages out of a Qt compressed help (``.qch``) file.

    A ``.qch`` file is an SQLite database. Page names live in
    ``FileNameTable`` and the payloads in ``FileDataTable``; every payload
    is zlib data preceded by a 4-byte big-endian length header.
    """

    HEADER_SIZE = 4

    def __init__(self, archive_path: Path) -> None:
        """Initialise archive reader with the given path.

        Args:
            archive_path: Path to the ``.qch`` file.
        """
        self.archive_path = archive_path

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for archive connections.

        Yields:
            SQLite connection with Row factory enabled.
        """
        conn = sqlite3.connect(self.archive_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @classmethod
    def decompress(cls, blob: bytes) -> str:
        """Decode one stored payload.

        Args:
            blob: Raw ``Data`` column value.

        Returns:
            The decompressed page markup.

        Raises:
            ArchiveError: If the payload is shorter than its header.
        """
        if len(blob) < cls.HEADER_SIZE:
            msg = f"Archive entry too short: {len(blob)} bytes"
            raise ArchiveError(msg)
        return zlib.decompress(blob[cls.HEADER_SIZE :]).decode("utf-8")

    def read_pages(self) -> dict[str, str]:
        """Read and strip every HTML page in the archive.

        Returns:
            Page names mapped to plain text.
        """
        pages: dict[str, str] = {}
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT Name, Data FROM FileNameTable
                INNER JOIN FileDataTable ON FileNameTable.FileId = FileDataTable.Id
                WHERE Name LIKE '%.html'
                ORDER BY Name
                """
            )
            for row in cursor:
                pages[row["Name"]] = strip_tags(self.decompress(row["Data"]))
                logger.debug("Loaded: %s", row["Name"])
        return pages


def read_html_page(file_path: Path) -> str:
    """Read a single HTML page from disk as plain text.

    Args:
        file_path: Path to the ``.html`` file.

    Returns:
        Stripped page text.
    """
    source = file_path.read_text(encoding="utf-8")
    return strip_tags(source.replace("\r", "").replace("\\", "\\\\"))


def load_from_qch(docs_path: Path, module: str) -> dict[str, str]:
    """Load pages from ``qt<module>.qch`` under the documentation root.

    Args:
        docs_path: Documentation root directory.
        module: Qt module name, e.g. ``Core``.

    Returns:
        Page names mapped to plain text, empty if there is no archive.
    """
    archive_path = docs_path / f"qt{module.lower()}.qch"
    if not archive_path.is_file():
        return {}
    logger.info("Reading documentation archive %s", archive_path)
    return QchArchive(archive_path).read_pages()


def load_from_html(docs_path: Path, module: str) -> dict[str, str]:
    """Load pages from the ``qt<module>`` HTML directory under the documentation root.

    Args:
        docs_path: Documentation root directory.
        module: Qt module name, e.g. ``Core``.

    Returns:
        Page file names mapped to plain text, empty if there is no directory.
    """
    html_path = docs_path / f"qt{module.lower()}"
    if not html_path.is_dir():
        return {}
    logger.info("Reading documentation pages from %s", html_path)
    return {file_path.name: read_html_page(file_path) for file_path in sorted(html_path.glob("*.html"))}


def load_documentation(docs_path: Path, module: str) -> DocumentationStore:
    """Build the documentation store for a Qt module.

    The compressed help archive is preferred; the HTML tree is the
    fallback. A missing or unreadable source gives an empty store, so
    matching silently finds nothing.

    Args:
        docs_path: Documentation root directory.
        module: Qt module name, e.g. ``Core``.

    Returns:
        DocumentationStore instance.
    """
    if not docs_path.is_dir():
        logger.info("Documentation path does not exist: %s", docs_path)
        return DocumentationStore()
    try:
        pages = load_from_qch(docs_path, module) or load_from_html(docs_path, module)
    except (ArchiveError, sqlite3.Error, zlib.error, OSError, UnicodeDecodeError) as exc:
        logger.error("Documentation loading failed: %s", exc)
        return DocumentationStore()

    logger.info("Loaded %d documentation pages for module %s", len(pages), module)
    return DocumentationStore(pages)
