"""Catalog importer: bulk-loads the JSON catalog into Elasticsearch."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Iterable

from elasticsearch import Elasticsearch, helpers

from .catalog import load_catalog_file
from .config import settings

logger = logging.getLogger(__name__)


def _prepare_term(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": int(raw.get("id") or 0),
        "taxonomy": raw.get("taxonomy", ""),
        "name": raw.get("name", ""),
        "slug": raw.get("slug", ""),
        "count": int(raw.get("count") or 0),
        "url": raw.get("url"),
    }


def _prepare_product(raw: Dict[str, Any]) -> Dict[str, Any]:
    product = {
        "id": int(raw.get("id") or 0),
        "title": raw.get("title") or raw.get("name") or "",
        "excerpt": raw.get("excerpt", ""),
        "content": raw.get("content") or raw.get("description") or "",
        "status": raw.get("status", "publish"),
        "categories": list(raw.get("categories", [])),
        "visibility": list(raw.get("visibility", [])),
    }
    for key in ("slug", "price_html", "thumbnail", "url"):
        if raw.get(key):
            product[key] = raw[key]
    if raw.get("price") not in (None, ""):
        product["price"] = str(raw["price"])
    return product


def _iter_actions(catalog: Dict[str, list]) -> Iterable[dict]:
    for name in catalog["taxonomies"]:
        yield {"_index": settings.es_taxonomies_index, "_id": name, "_source": {"name": name}}
    for raw in catalog["terms"]:
        term = _prepare_term(raw)
        yield {
            "_index": settings.es_terms_index,
            "_id": f"{term['taxonomy']}:{term['id'] or term['slug']}",
            "_source": term,
        }
    for raw in catalog["products"]:
        product = _prepare_product(raw)
        yield {"_index": settings.es_index, "_id": product["id"], "_source": product}


async def import_catalog(es: Elasticsearch) -> int:
    catalog = load_catalog_file(Path(settings.catalog_path))
    actions = list(_iter_actions(catalog))
    if not actions:
        return 0
    await asyncio.to_thread(helpers.bulk, es, actions, refresh=True)
    logger.info(
        "Imported %s taxonomies, %s terms, %s products",
        len(catalog["taxonomies"]),
        len(catalog["terms"]),
        len(catalog["products"]),
    )
    return len(actions)


async def import_if_empty(es: Elasticsearch) -> int:
    from .indexing import index_is_empty

    if not await index_is_empty(es):
        return 0
    return await import_catalog(es)


async def reindex_data(es: Elasticsearch) -> int:
    from .indexing import drop_indices, ensure_indices

    await drop_indices(es)
    await ensure_indices(es)
    return await import_catalog(es)
