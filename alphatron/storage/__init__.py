"""Document storage backends."""

from .documents import DocumentStore, JsonFileDocumentStore, MemoryDocumentStore

__all__ = ["DocumentStore", "JsonFileDocumentStore", "MemoryDocumentStore"]
