"""
Document store for Relayer.

Serves static documents from a directory on disk, keeping every document
it has read in memory. A document is addressed by (directory, name,
extension), e.g. ``("documents", "document", "json")``.

Text extensions are decoded to str; everything else is returned as bytes.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePosixPath
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = frozenset({"json", "html", "htm", "xml", "text", "txt"})

DocumentContent = str | bytes


@runtime_checkable
class DocumentStore(Protocol):
    """Retrieval of static documents; None signals not found."""

    async def get(self, directory: str, name: str, extension: str) -> DocumentContent | None:
        ...


def split_document_path(path: str) -> tuple[str, str, str]:
    """
    Split ``dir/name.ext`` into its components.

    Example:
        >>> split_document_path("documents/document.jpg")
        ('documents', 'document', 'jpg')
    """
    pure = PurePosixPath(path.lstrip("/"))
    directory = str(pure.parent) if str(pure.parent) != "." else ""
    return directory, pure.stem, pure.suffix.lstrip(".").lower()


class FileDocumentStore:
    """
    File system document store with an in-memory cache.

    Paths that escape the root directory are treated as not found.

    Example:
        store = FileDocumentStore("/var/task")
        doc = await store.get("documents", "document", "json")
    """

    def __init__(self, root: str | Path = "."):
        self.root = Path(root).resolve()
        self._cache: dict[tuple[str, str, str], DocumentContent] = {}

    @property
    def cached_count(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        """Drop all cached documents."""
        self._cache.clear()

    async def get(self, directory: str, name: str, extension: str) -> DocumentContent | None:
        key = (directory, name, extension)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"retrieving document |{directory}/{name}.{extension}| from memory")
            return cached

        file_path = (self.root / directory / f"{name}.{extension}").resolve()
        if not file_path.is_relative_to(self.root) or not file_path.is_file():
            return None

        try:
            data = await asyncio.to_thread(file_path.read_bytes)
        except OSError as e:
            logger.error(f"Error reading document {file_path}: {e}")
            return None

        content: DocumentContent = data
        if extension.lower() in TEXT_EXTENSIONS:
            try:
                content = data.decode("utf-8")
            except UnicodeDecodeError as e:
                logger.error(f"Document {file_path} is not valid UTF-8: {e}")
                return None

        self._cache[key] = content
        logger.debug(f"retrieving document |{file_path}| from file")
        return content

    async def get_path(self, path: str) -> DocumentContent | None:
        """Retrieve a document by its ``dir/name.ext`` path."""
        return await self.get(*split_document_path(path))
