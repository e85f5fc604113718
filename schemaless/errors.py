from __future__ import annotations


class SchemalessError(Exception):
    """Base class for errors raised by this package."""


class DocumentProcessingError(SchemalessError):
    """Input text could not be parsed into documents."""


class StoreError(SchemalessError):
    """A call to the document store failed."""

    def __init__(self, message: str, collection: str | None = None) -> None:
        super().__init__(message)
        self.collection = collection


class CollectionNotAllowedError(SchemalessError, ValueError):
    def __init__(self, collection: str) -> None:
        super().__init__(f"Collection not allowed: {collection}")
        self.collection = collection
