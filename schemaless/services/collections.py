from __future__ import annotations

from typing import Iterable, List, Optional

from ..errors import CollectionNotAllowedError
from ..settings import parse_collections, settings


class CollectionValidator:
    """Allow-list of collections; an empty list allows every collection."""

    def __init__(self, allowed: Optional[Iterable[str]] = None) -> None:
        if allowed is None:
            allowed = settings.collections
        elif isinstance(allowed, str):
            allowed = parse_collections(allowed)
        self.allowed = frozenset(c.strip() for c in allowed if c and c.strip())

    @property
    def all_allowed(self) -> bool:
        return not self.allowed

    def is_allowed(self, collection: str) -> bool:
        return self.all_allowed or collection in self.allowed

    def filter_allowed(self, collections: Iterable[str]) -> List[str]:
        return [c for c in collections if self.is_allowed(c)]

    def assert_allowed(self, collection: str) -> None:
        if not self.is_allowed(collection):
            raise CollectionNotAllowedError(collection)
