"""Ingestion of cheat-sheet sources and the active catalog snapshot."""

import logging
import os
import threading
from pathlib import Path

from cheatsheet_reference.errors import CheatSheetError, SourceUnavailable
from cheatsheet_reference.index import build_index
from cheatsheet_reference.models import ReferenceDocument
from cheatsheet_reference.parser import MARKDOWN_SUFFIXES, RST_SUFFIXES, DocumentParser
from cheatsheet_reference.query import Catalog

logger = logging.getLogger(__name__)


class ReferenceLibrary:
    """Loads reference documents and publishes their indexes as one catalog.

    Readers take ``catalog`` without locking. A load builds a complete new
    catalog first and only then replaces the reference, so a failed load
    leaves the previous catalog active.
    """

    SOURCE_SUFFIXES = MARKDOWN_SUFFIXES + RST_SUFFIXES

    def __init__(self, parser: DocumentParser | None = None) -> None:
        """Initialise library with an optional parser.

        Args:
            parser: DocumentParser instance, a default one when omitted.
        """
        self.parser = parser or DocumentParser()
        self.source_path: Path | None = None
        self._catalog: Catalog | None = None
        self._reload_lock = threading.Lock()

    @property
    def catalog(self) -> Catalog:
        """Return the active catalog.

        Raises:
            SourceUnavailable: If nothing has been loaded yet.
        """
        catalog = self._catalog
        if catalog is None:
            msg = "No reference source has been loaded"
            raise SourceUnavailable(msg)
        return catalog

    def load(self, source_path: Path) -> int:
        """Load a file or every reference file under a directory.

        Args:
            source_path: Path to a file or directory.

        Returns:
            Number of documents loaded.

        Raises:
            SourceUnavailable: If the path does not exist or cannot be read.
            MalformedDocument: If any file is malformed.
        """
        with self._reload_lock:
            documents = self._read_documents(source_path)
            self._publish(documents)
            self.source_path = source_path
        return len(documents)

    def load_text(self, text: str, source: str = "<string>") -> int:
        """Load Markdown text from a stream or string.

        Args:
            text: Markdown text.
            source: Name used for fallback titles and error messages.

        Returns:
            Number of documents loaded.
        """
        with self._reload_lock:
            documents = self.parser.parse_text(text, source)
            self._publish(documents)
            self.source_path = None
        return len(documents)

    def reload(self) -> int:
        """Re-ingest the last loaded path.

        Returns:
            Number of documents loaded.

        Raises:
            SourceUnavailable: If no path has been loaded before.
        """
        if self.source_path is None:
            msg = "Nothing to reload: no source path has been loaded"
            raise SourceUnavailable(msg)
        try:
            return self.load(self.source_path)
        except CheatSheetError:
            logger.warning("Reload of %s failed, keeping previous catalog", self.source_path)
            raise

    def _read_documents(self, source_path: Path) -> list[ReferenceDocument]:
        """Parse a file, or every reference file under a directory in path order.

        Args:
            source_path: File or directory to read.

        Returns:
            Parsed documents.

        Raises:
            SourceUnavailable: If the path is missing or a directory cannot be listed.
        """
        if not source_path.exists():
            msg = f"Reference source does not exist: {source_path}"
            raise SourceUnavailable(msg, path=str(source_path))

        if source_path.is_file():
            return self.parser.parse_file(source_path)

        files = []
        for root, _, names in os.walk(source_path, onerror=self._walk_error):
            files.extend(Path(root) / name for name in names if Path(name).suffix.lower() in self.SOURCE_SUFFIXES)
        files.sort()
        logger.info("Found %d reference files to load", len(files))

        documents: list[ReferenceDocument] = []
        for file_path in files:
            documents.extend(self.parser.parse_file(file_path))
        return documents

    def _publish(self, documents: list[ReferenceDocument]) -> None:
        """Index documents and swap in the new catalog.

        Args:
            documents: Fully parsed documents.
        """
        indexes = []
        for document in documents:
            index = build_index(document)
            logger.debug(
                "Indexed %r: %d sections, %d keywords", document.title, len(document.sections), len(index.keywords)
            )
            indexes.append(index)
        self._catalog = Catalog(indexes)
        logger.info("Loaded %d documents", len(indexes))

    @staticmethod
    def _walk_error(error: OSError) -> None:
        """Fail the load when a directory under the source cannot be listed.

        Args:
            error: Error raised while listing a directory.

        Raises:
            SourceUnavailable: Always, wrapping the original error.
        """
        msg = f"Cannot list {error.filename}: {error.strerror or error}"
        raise SourceUnavailable(msg, path=error.filename) from error
