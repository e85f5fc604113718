from __future__ import annotations

import logging
import time
from typing import Iterator, Optional, Sequence

from ..documents.creators import DocumentCreator, get_document_creator
from ..documents.flattener import Document
from ..settings import settings
from .collections import CollectionValidator
from .store import DocumentStore, OpenSearchStore

log = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000


def iter_batches(documents: Sequence[Document], batch_size: int) -> Iterator[Sequence[Document]]:
    for start in range(0, len(documents), batch_size):
        yield documents[start:start + batch_size]


class IndexingService:
    """Loads normalized documents into a collection of the document store.

    Documents are written in batches. When a batch write fails, every
    document of that batch is retried on its own and only the ones the store
    accepts are counted. The collection is committed exactly once per call.
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        creator: Optional[DocumentCreator] = None,
        validator: Optional[CollectionValidator] = None,
        batch_size: Optional[int] = None,
    ) -> None:
        self.store = store if store is not None else OpenSearchStore()
        self.creator = creator or get_document_creator()
        self.validator = validator or CollectionValidator()
        if batch_size is None:
            batch_size = settings.index_batch_size or DEFAULT_BATCH_SIZE
        self.batch_size = batch_size
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")

    def index_json_documents(self, collection: str, json_text: str) -> int:
        return self.index_documents(collection, self.creator.create_from_json(json_text))

    def index_csv_documents(self, collection: str, csv_text: str) -> int:
        return self.index_documents(collection, self.creator.create_from_csv(csv_text))

    def index_xml_documents(self, collection: str, xml_text: str) -> int:
        return self.index_documents(collection, self.creator.create_from_xml(xml_text))

    def index_text(self, collection: str, fmt: str, text: str) -> int:
        return self.index_documents(collection, self.creator.create_documents(fmt, text))

    def index_documents(self, collection: str, documents: Sequence[Document]) -> int:
        """Write ``documents`` to ``collection`` and return how many were accepted.

        The count is provisional until the final commit succeeds; a failing
        commit propagates and no count is returned.
        """
        self.validator.assert_allowed(collection)
        t0 = time.time()
        total_batches = (len(documents) + self.batch_size - 1) // self.batch_size
        log.info(
            "Indexing %d documents into %s in %d batches (batch_size=%d)",
            len(documents),
            collection,
            total_batches,
            self.batch_size,
        )

        success = 0
        for batch_num, batch in enumerate(iter_batches(documents, self.batch_size), start=1):
            offset = (batch_num - 1) * self.batch_size
            success += self._index_batch(collection, batch, batch_num, total_batches, offset)

        self.store.commit(collection)
        log.info(
            "Indexed %d/%d documents into %s (%.2fs)",
            success,
            len(documents),
            collection,
            time.time() - t0,
        )
        return success

    def _index_batch(
        self,
        collection: str,
        batch: Sequence[Document],
        batch_num: int,
        total_batches: int,
        offset: int,
    ) -> int:
        try:
            self.store.add_documents(collection, batch)
            log.debug("Batch %d/%d: %d documents added", batch_num, total_batches, len(batch))
            return len(batch)
        except Exception as e:
            log.warning(
                "Batch %d/%d (%d documents) failed, retrying documents one by one: %s",
                batch_num,
                total_batches,
                len(batch),
                e,
            )
        return sum(self._index_one(collection, doc, offset + idx) for idx, doc in enumerate(batch))

    def _index_one(self, collection: str, doc: Document, position: int) -> int:
        try:
            self.store.add_document(collection, doc)
            return 1
        except Exception as e:
            log.warning("Document %d could not be indexed into %s: %s", position, collection, e)
            return 0
