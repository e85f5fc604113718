from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..settings import settings
from .collections import CollectionValidator
from .store import DocumentStore, OpenSearchStore

SORT_ITEM = "item"
SORT_ORDER = "order"
MATCH_ALL_QUERY = "*:*"
DEFAULT_FACET_LIMIT = 100


def _query_clause(query: str) -> Dict[str, Any]:
    if not query or not query.strip() or query.strip() == MATCH_ALL_QUERY:
        return {"match_all": {}}
    return {"query_string": {"query": query}}


def build_search_body(
    query: Optional[str] = None,
    filter_queries: Optional[Sequence[str]] = None,
    facet_fields: Optional[Sequence[str]] = None,
    sort_clauses: Optional[Sequence[Mapping[str, str]]] = None,
    start: Optional[int] = None,
    rows: Optional[int] = None,
) -> Dict[str, Any]:
    filter_clauses: List[Dict[str, Any]] = [
        {"query_string": {"query": fq}} for fq in (filter_queries or []) if fq and fq.strip()
    ]

    body: Dict[str, Any] = {
        "query": {
            "bool": {
                "must": [_query_clause(query or "")],
                "filter": filter_clauses,
            }
        },
        "from": start if start is not None else 0,
        "size": rows if rows is not None else settings.page_size,
        "track_total_hits": True,
    }

    if facet_fields:
        body["aggs"] = {
            f: {"terms": {"field": f, "min_doc_count": 1, "size": DEFAULT_FACET_LIMIT, "order": {"_count": "desc"}}}
            for f in facet_fields
        }

    if sort_clauses:
        sort: List[Dict[str, Any]] = []
        for clause in sort_clauses:
            item = clause.get(SORT_ITEM)
            if not item:
                raise ValueError(f"Sort clause without '{SORT_ITEM}': {dict(clause)}")
            order = (clause.get(SORT_ORDER) or "asc").lower()
            if order not in ("asc", "desc"):
                raise ValueError(f"Sort order must be 'asc' or 'desc', got {order!r}")
            sort.append({item: {"order": order}})
        body["sort"] = sort

    return body


def parse_search_response(resp: Dict[str, Any], start: int) -> Dict[str, Any]:
    hits = resp.get("hits", {}) or {}
    total = hits.get("total", 0)
    if isinstance(total, dict):
        total = total.get("value", 0)

    documents: List[Dict[str, Any]] = []
    for h in hits.get("hits", []):
        src = dict(h.get("_source", {}) or {})
        src.setdefault("id", h.get("_id"))
        documents.append(src)

    facets: Dict[str, Dict[str, int]] = {}
    for name, agg in (resp.get("aggregations") or {}).items():
        buckets = agg.get("buckets", []) if isinstance(agg, dict) else []
        facets[name] = {
            str(b.get("key_as_string", b.get("key"))): int(b.get("doc_count", 0)) for b in buckets
        }

    return {
        "num_found": total,
        "start": start,
        "max_score": hits.get("max_score"),
        "documents": documents,
        "facets": facets,
    }


class SearchService:
    """Maps search parameters onto a store query: query string, filters,
    facets, sort and pagination.
    """

    def __init__(self, store: Optional[DocumentStore] = None, validator: Optional[CollectionValidator] = None) -> None:
        self.store = store if store is not None else OpenSearchStore()
        self.validator = validator or CollectionValidator()

    def search(
        self,
        collection: str,
        query: Optional[str] = None,
        filter_queries: Optional[Sequence[str]] = None,
        facet_fields: Optional[Sequence[str]] = None,
        sort_clauses: Optional[Sequence[Mapping[str, str]]] = None,
        start: Optional[int] = None,
        rows: Optional[int] = None,
    ) -> Dict[str, Any]:
        self.validator.assert_allowed(collection)
        body = build_search_body(query, filter_queries, facet_fields, sort_clauses, start, rows)
        resp = self.store.query(collection, body)
        return parse_search_response(resp, body["from"])

    def list_collections(self) -> List[str]:
        return self.validator.filter_allowed(self.store.list_collections())
