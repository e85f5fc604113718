from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

from opensearchpy import OpenSearch, helpers
from opensearchpy.exceptions import OpenSearchException

from ..documents.flattener import Document
from ..errors import StoreError
from ..settings import settings

log = logging.getLogger(__name__)


_client: Optional[OpenSearch] = None


def get_client() -> OpenSearch:
    global _client
    if _client is not None:
        return _client

    auth = None
    if settings.os_user and settings.os_password:
        auth = (settings.os_user, settings.os_password)

    _client = OpenSearch(
        hosts=[{"host": settings.os_host, "port": settings.os_port}],
        http_compress=True,
        http_auth=auth,
        use_ssl=settings.os_use_ssl,
        verify_certs=False,
        ssl_assert_hostname=False,
        ssl_show_warn=False,
        timeout=settings.os_timeout,
    )
    return _client


class DocumentStore(Protocol):
    """The operations the loader and the search service need from a store."""

    def add_documents(self, collection: str, documents: Sequence[Document]) -> None: ...

    def add_document(self, collection: str, document: Document) -> None: ...

    def commit(self, collection: str) -> None: ...

    def query(self, collection: str, body: Dict[str, Any]) -> Dict[str, Any]: ...

    def list_collections(self) -> List[str]: ...

    def ping(self) -> bool: ...


def _doc_id(doc: Document) -> Optional[str]:
    # a single-valued "id" field becomes the store id, so reloading upserts
    value = doc.get("id")
    if isinstance(value, (str, int, float)) and not isinstance(value, bool) and value != "":
        return str(value)
    return None


class OpenSearchStore:
    """DocumentStore backed by OpenSearch; a collection is an index."""

    def __init__(self, client: Optional[OpenSearch] = None) -> None:
        self._client = client

    @property
    def client(self) -> OpenSearch:
        if self._client is None:
            self._client = get_client()
        return self._client

    def _action(self, collection: str, doc: Document) -> Dict[str, Any]:
        action: Dict[str, Any] = {
            "_op_type": "index",
            "_index": collection,
            "_source": dict(doc),
        }
        doc_id = _doc_id(doc)
        if doc_id is not None:
            action["_id"] = doc_id
        return action

    def add_documents(self, collection: str, documents: Sequence[Document]) -> None:
        if not documents:
            return
        actions = [self._action(collection, d) for d in documents]
        try:
            # one bulk request per call; any rejected item fails the whole call
            helpers.bulk(self.client, actions, chunk_size=len(actions), raise_on_error=True)
        except OpenSearchException as e:
            raise StoreError(f"Bulk add of {len(actions)} documents to {collection} failed: {e}", collection) from e

    def add_document(self, collection: str, document: Document) -> None:
        doc_id = _doc_id(document)
        try:
            if doc_id is not None:
                self.client.index(index=collection, body=dict(document), id=doc_id)
            else:
                self.client.index(index=collection, body=dict(document))
        except OpenSearchException as e:
            raise StoreError(f"Add of document to {collection} failed: {e}", collection) from e

    def commit(self, collection: str) -> None:
        try:
            self.client.indices.refresh(index=collection)
        except OpenSearchException as e:
            raise StoreError(f"Commit of {collection} failed: {e}", collection) from e
        log.debug("Committed collection %s", collection)

    def query(self, collection: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return self.client.search(index=collection, body=body)
        except OpenSearchException as e:
            raise StoreError(f"Query on {collection} failed: {e}", collection) from e

    def list_collections(self) -> List[str]:
        try:
            aliases = self.client.indices.get_alias(index="*")
        except OpenSearchException as e:
            raise StoreError(f"Listing collections failed: {e}") from e
        return sorted(name for name in aliases if not name.startswith("."))

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except Exception:
            return False
