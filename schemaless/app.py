from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from starlette.requests import Request

from .settings import settings
from .api.routes import get_store, router as api_router
from .errors import CollectionNotAllowedError, DocumentProcessingError, StoreError

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(message)s")
log = logging.getLogger(__name__)

app = FastAPI(title="Schemaless Loader", debug=settings.app_env != "production")


@app.on_event("startup")
async def _startup_check():
    if not get_store().ping():
        # Hard fail if OpenSearch is not reachable
        raise RuntimeError("OpenSearch is not reachable at startup. Check OPENSEARCH_* settings and service status.")


@app.exception_handler(DocumentProcessingError)
async def _document_processing_error(request: Request, exc: DocumentProcessingError):
    return JSONResponse({"error": str(exc)}, status_code=400)


@app.exception_handler(CollectionNotAllowedError)
async def _collection_not_allowed(request: Request, exc: CollectionNotAllowedError):
    return JSONResponse({"error": str(exc)}, status_code=403)


@app.exception_handler(StoreError)
async def _store_error(request: Request, exc: StoreError):
    log.error("Store error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": str(exc)}, status_code=502)


@app.exception_handler(ValueError)
async def _value_error(request: Request, exc: ValueError):
    return JSONResponse({"error": str(exc)}, status_code=400)


app.include_router(api_router)
