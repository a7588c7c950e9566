"""Document storage for bot settings and per-feature state."""

import asyncio
import copy
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import structlog

from ..errors import DocumentStoreError


logger = structlog.get_logger(__name__)


def _check_name(kind: str, value: str) -> None:
    """Reject names that would escape the store root."""
    if not value or value in {".", ".."} or "/" in value or "\\" in value:
        raise DocumentStoreError(f"Invalid {kind} name: {value!r}")


class DocumentStore(ABC):
    """Collection/document keyed storage of JSON-compatible dicts."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Read a document.

        Args:
            collection: Collection name, e.g. 'settings'
            doc_id: Document id within the collection

        Returns:
            Document data or None if the document does not exist

        Raises:
            DocumentStoreError: If the document exists but cannot be read
        """
        pass

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or replace a document.

        Raises:
            DocumentStoreError: If the document cannot be written
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the store."""
        pass


class MemoryDocumentStore(DocumentStore):
    """In-process document store."""

    def __init__(self, documents: Optional[Dict[Tuple[str, str], Dict[str, Any]]] = None) -> None:
        self._documents: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

        for (collection, doc_id), data in (documents or {}).items():
            self._documents[(collection, doc_id)] = copy.deepcopy(data)

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            data = self._documents.get((collection, doc_id))
            return copy.deepcopy(data) if data is not None else None

    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        async with self._lock:
            self._documents[(collection, doc_id)] = copy.deepcopy(data)

    def get_stats(self) -> Dict[str, Any]:
        return {"backend": "memory", "documents": len(self._documents)}


class JsonFileDocumentStore(DocumentStore):
    """Stores each document as ``<root>/<collection>/<doc_id>.json``."""

    def __init__(self, root: Path) -> None:
        """Initialize the file store.

        Args:
            root: Directory holding one sub-directory per collection
        """
        self.root = Path(root)
        self._lock = asyncio.Lock()

        logger.info("Initialized JsonFileDocumentStore", root=str(self.root))

    def _path(self, collection: str, doc_id: str) -> Path:
        _check_name("collection", collection)
        _check_name("document", doc_id)
        return self.root / collection / f"{doc_id}.json"

    def _read(self, path: Path) -> Optional[Dict[str, Any]]:
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            raise DocumentStoreError(f"Failed to read {path}: {e}") from e

        if not isinstance(data, dict):
            raise DocumentStoreError(f"Document {path} is not a JSON object")
        return data

    def _write(self, path: Path, data: Dict[str, Any]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, sort_keys=True)
                os.replace(tmp_path, path)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise DocumentStoreError(f"Failed to write {path}: {e}") from e

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        path = self._path(collection, doc_id)
        return await asyncio.to_thread(self._read, path)

    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        path = self._path(collection, doc_id)
        async with self._lock:
            await asyncio.to_thread(self._write, path, data)

        logger.debug("Stored document", collection=collection, document=doc_id)

    def get_stats(self) -> Dict[str, Any]:
        return {"backend": "json_file", "root": str(self.root)}
