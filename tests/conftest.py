from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pytest

from schemaless.errors import StoreError


class FakeStore:
    """In-memory DocumentStore that records every call."""

    def __init__(
        self,
        fail_batch: bool = False,
        fail_single: Optional[Callable[[Dict[str, Any]], bool]] = None,
        fail_commit: bool = False,
        batch_exc: Optional[Exception] = None,
    ) -> None:
        self.fail_batch = fail_batch
        self.fail_single = fail_single or (lambda doc: False)
        self.fail_commit = fail_commit
        self.batch_exc = batch_exc
        self.batch_calls: List[List[Dict[str, Any]]] = []
        self.single_calls: List[Dict[str, Any]] = []
        self.commits: List[str] = []
        self.stored: List[Dict[str, Any]] = []
        self.queries: List[Dict[str, Any]] = []
        self.collections: List[str] = []
        self.response: Dict[str, Any] = {"hits": {"total": {"value": 0}, "max_score": None, "hits": []}}
        self.up = True

    def add_documents(self, collection, documents):
        self.batch_calls.append(list(documents))
        if self.batch_exc is not None:
            raise self.batch_exc
        if self.fail_batch:
            raise StoreError("batch rejected", collection)
        self.stored.extend(documents)

    def add_document(self, collection, document):
        self.single_calls.append(document)
        if self.fail_single(document):
            raise StoreError("document rejected", collection)
        self.stored.append(document)

    def commit(self, collection):
        self.commits.append(collection)
        if self.fail_commit:
            raise StoreError("commit failed", collection)

    def query(self, collection, body):
        self.queries.append({"collection": collection, "body": body})
        return self.response

    def list_collections(self):
        return list(self.collections)

    def ping(self):
        return self.up


@pytest.fixture
def make_store():
    return FakeStore


@pytest.fixture
def store():
    return FakeStore()
