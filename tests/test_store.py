from __future__ import annotations

import pytest
from opensearchpy.exceptions import ConnectionError as OSConnectionError
from opensearchpy.exceptions import NotFoundError, TransportError
from opensearchpy.helpers import BulkIndexError

from schemaless.errors import StoreError
from schemaless.services import store as store_mod
from schemaless.services.store import OpenSearchStore


class FakeIndices:
    def __init__(self, client):
        self.client = client

    def refresh(self, index):
        self.client.calls.append(("refresh", index))
        if self.client.fail:
            raise NotFoundError(404, "index_not_found_exception", {})

    def get_alias(self, index):
        return {"books": {}, ".kibana": {}, "films": {}}


class FakeClient:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []
        self.indices = FakeIndices(self)

    def index(self, index, body, id=None):
        self.calls.append(("index", index, body, id))
        if self.fail:
            raise TransportError(400, "mapper_parsing_exception", {})
        return {"result": "created"}

    def search(self, index, body):
        self.calls.append(("search", index, body))
        if self.fail:
            raise OSConnectionError("N/A", "connection refused", None)
        return {"hits": {"total": {"value": 0}, "hits": []}}

    def ping(self):
        if self.fail:
            raise OSConnectionError("N/A", "connection refused", None)
        return True


@pytest.fixture
def bulk_calls(monkeypatch):
    calls = []

    def fake_bulk(client, actions, **kwargs):
        actions = list(actions)
        calls.append({"actions": actions, "kwargs": kwargs})
        return len(actions), []

    monkeypatch.setattr(store_mod.helpers, "bulk", fake_bulk)
    return calls


def test_add_documents_builds_bulk_actions(bulk_calls):
    store = OpenSearchStore(client=FakeClient())
    store.add_documents("books", [{"id": "b1", "title": "Dune"}, {"title": "no id"}, {"id": ["x", "y"]}])
    (call,) = bulk_calls
    assert call["kwargs"]["raise_on_error"] is True
    assert call["kwargs"]["chunk_size"] == 3
    a1, a2, a3 = call["actions"]
    assert a1 == {"_op_type": "index", "_index": "books", "_id": "b1", "_source": {"id": "b1", "title": "Dune"}}
    assert "_id" not in a2
    assert "_id" not in a3


def test_add_documents_empty_is_a_no_op(bulk_calls):
    OpenSearchStore(client=FakeClient()).add_documents("books", [])
    assert bulk_calls == []


def test_add_documents_wraps_bulk_errors(monkeypatch):
    def failing_bulk(client, actions, **kwargs):
        raise BulkIndexError("1 document(s) failed to index.", [{"index": {"error": "bad"}}])

    monkeypatch.setattr(store_mod.helpers, "bulk", failing_bulk)
    with pytest.raises(StoreError) as excinfo:
        OpenSearchStore(client=FakeClient()).add_documents("books", [{"id": 1}])
    assert excinfo.value.collection == "books"
    assert isinstance(excinfo.value.__cause__, BulkIndexError)


def test_add_document_uses_id_field():
    client = FakeClient()
    store = OpenSearchStore(client=client)
    store.add_document("books", {"id": 7, "title": "x"})
    store.add_document("books", {"title": "y"})
    assert client.calls[0] == ("index", "books", {"id": 7, "title": "x"}, "7")
    assert client.calls[1] == ("index", "books", {"title": "y"}, None)


def test_store_errors_are_wrapped():
    store = OpenSearchStore(client=FakeClient(fail=True))
    with pytest.raises(StoreError):
        store.add_document("books", {"id": 1})
    with pytest.raises(StoreError):
        store.commit("books")
    with pytest.raises(StoreError):
        store.query("books", {"query": {"match_all": {}}})


def test_commit_refreshes_the_index():
    client = FakeClient()
    OpenSearchStore(client=client).commit("books")
    assert client.calls == [("refresh", "books")]


def test_list_collections_hides_system_indices():
    assert OpenSearchStore(client=FakeClient()).list_collections() == ["books", "films"]


def test_ping_never_raises():
    assert OpenSearchStore(client=FakeClient()).ping() is True
    assert OpenSearchStore(client=FakeClient(fail=True)).ping() is False
