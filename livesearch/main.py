"""FastAPI application wiring the live search endpoint."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from . import aggregator
from .cache import CacheBackend, get_cache, load_cached, store_cached
from .catalog import CatalogBackend, ElasticCatalog, get_catalog
from .config import settings
from .exceptions import CatalogUnavailableError, InvalidNonceError
from .importer import import_if_empty, reindex_data
from .indexing import ensure_indices
from .models import Envelope, NonceResponse, SearchResponse
from .nonce import issue_nonce, require_nonce

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

# Replace uvicorn's default handlers so search timing lines share one format.
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "elastic_transport"):
    logging.getLogger(name).setLevel(LOG_LEVEL)

logger = logging.getLogger(__name__)
logger.info("Logging configured at %s", settings.log_level.upper())

SEARCH_PATH = "/search"
CATALOG_INACTIVE_MESSAGE = "Catalog not active"

app = FastAPI(title="Live Product Search")


def _error_envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "data": {"message": message}})


@app.exception_handler(InvalidNonceError)
async def invalid_nonce_handler(request: Request, exc: InvalidNonceError) -> JSONResponse:
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
    return _error_envelope(403, str(exc))


@app.exception_handler(CatalogUnavailableError)
async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailableError) -> JSONResponse:
    logger.error("Catalog unavailable for %s: %s", request.url.path, exc)
    return _error_envelope(400, CATALOG_INACTIVE_MESSAGE)


@app.on_event("startup")
async def startup_event() -> None:
    catalog = get_catalog()
    if not isinstance(catalog, ElasticCatalog):
        return
    await ensure_indices(catalog.client)
    if settings.load_on_startup:
        imported = await import_if_empty(catalog.client)
        if imported:
            logger.info("Imported %s catalog documents on startup", imported)


async def _request_fields(request: Request) -> Dict[str, Any]:
    fields: Dict[str, Any] = dict(request.query_params)
    if request.method == "POST":
        form = await request.form()
        fields.update({key: value for key, value in form.items() if isinstance(value, str)})
    return fields


@app.get("/health")
async def health(catalog: CatalogBackend = Depends(get_catalog)) -> dict:
    active = await asyncio.to_thread(catalog.is_active)
    return {
        "catalog": settings.catalog_backend,
        "active": active,
        "index": settings.es_index,
    }


@app.get("/nonce", response_model=NonceResponse)
async def nonce() -> NonceResponse:
    return NonceResponse(nonce=issue_nonce(), search_url=SEARCH_PATH)


@app.api_route(SEARCH_PATH, methods=["GET", "POST"], response_model=Envelope)
async def search(
    request: Request,
    catalog: CatalogBackend = Depends(get_catalog),
    cache: CacheBackend = Depends(get_cache),
) -> Envelope:
    fields = await _request_fields(request)
    require_nonce(fields.get("nonce"))
    if not await asyncio.to_thread(catalog.is_active):
        raise CatalogUnavailableError("Catalog backend did not answer ping")

    params = aggregator.parse_params(fields)
    if aggregator.is_short_query(params):
        return Envelope(success=True, data=SearchResponse())

    response = load_cached(cache, params)
    if response is None:
        response = await aggregator.search(catalog, params)
        store_cached(cache, params, response)
    return Envelope(success=True, data=response)


@app.post("/reindex")
async def reindex(catalog: CatalogBackend = Depends(get_catalog)) -> dict:
    if not isinstance(catalog, ElasticCatalog):
        raise HTTPException(status_code=400, detail="Reindexing requires the Elasticsearch catalog")
    count = await reindex_data(catalog.client)
    return {"indexed": count}
