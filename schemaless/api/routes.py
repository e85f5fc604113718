from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from .schemas import IndexResponse, SearchRequest, SearchResponse
from ..errors import DocumentProcessingError
from ..services.indexing_service import IndexingService
from ..services.search_service import SearchService
from ..services.store import OpenSearchStore

router = APIRouter()


@lru_cache
def get_store() -> OpenSearchStore:
    return OpenSearchStore()


def get_indexing_service() -> IndexingService:
    return IndexingService(store=get_store())


def get_search_service() -> SearchService:
    return SearchService(store=get_store())


@router.get("/healthz")
async def healthz(store: OpenSearchStore = Depends(get_store)):
    if not store.ping():
        return JSONResponse({"status": "down"}, status_code=503)
    return {"status": "ok"}


@router.get("/collections")
async def list_collections(service: SearchService = Depends(get_search_service)):
    return {"collections": service.list_collections()}


@router.post("/collections/{collection}/documents/{fmt}", response_model=IndexResponse)
async def index_documents(
    collection: str,
    fmt: str,
    request: Request,
    service: IndexingService = Depends(get_indexing_service),
):
    raw = await request.body()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DocumentProcessingError(f"Request body is not valid UTF-8: {e}") from e

    indexed = service.index_text(collection, fmt, text)
    return IndexResponse(collection=collection, format=fmt.lower(), indexed=indexed)


@router.post("/collections/{collection}/search", response_model=SearchResponse)
async def search(
    collection: str,
    payload: SearchRequest,
    service: SearchService = Depends(get_search_service),
):
    result = service.search(
        collection,
        query=payload.query,
        filter_queries=payload.filter_queries,
        facet_fields=payload.facet_fields,
        sort_clauses=[{"item": s.item, "order": s.order} for s in payload.sort],
        start=payload.start,
        rows=payload.rows,
    )
    return SearchResponse(**result)
