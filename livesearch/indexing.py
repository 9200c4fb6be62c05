"""Index creation and maintenance helpers for the catalog indices."""
from __future__ import annotations

import asyncio
import logging
from typing import Dict

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import BadRequestError, NotFoundError

from .config import settings

logger = logging.getLogger(__name__)

PRODUCT_MAPPINGS = {
    "properties": {
        "id": {"type": "long"},
        "title": {"type": "search_as_you_type"},
        "excerpt": {"type": "text"},
        "content": {"type": "text"},
        "status": {"type": "keyword"},
        "categories": {"type": "keyword"},
        "visibility": {"type": "keyword"},
        "slug": {"type": "keyword"},
        "price": {"type": "keyword"},
        "price_html": {"type": "keyword", "index": False},
        "thumbnail": {"type": "keyword", "index": False},
        "url": {"type": "keyword", "index": False},
    }
}

TERM_MAPPINGS = {
    "properties": {
        "id": {"type": "long"},
        "taxonomy": {"type": "keyword"},
        "name": {"type": "text", "fields": {"keyword": {"type": "keyword", "ignore_above": 256}}},
        "slug": {"type": "keyword"},
        "count": {"type": "integer"},
        "url": {"type": "keyword", "index": False},
    }
}

TAXONOMY_MAPPINGS = {"properties": {"name": {"type": "keyword"}}}


def catalog_indices() -> Dict[str, dict]:
    return {
        settings.es_index: PRODUCT_MAPPINGS,
        settings.es_terms_index: TERM_MAPPINGS,
        settings.es_taxonomies_index: TAXONOMY_MAPPINGS,
    }


async def ensure_indices(es: Elasticsearch) -> None:
    """Create the product, term and taxonomy indices if they are missing."""

    for index, mappings in catalog_indices().items():
        exists = await asyncio.to_thread(es.indices.exists, index=index)
        if exists:
            continue
        logger.info("Creating index %s", index)
        try:
            await asyncio.to_thread(es.indices.create, index=index, mappings=mappings)
        except BadRequestError as exc:
            if getattr(exc, "error", "") == "resource_already_exists_exception":
                logger.info("Index %s already exists", index)
                continue
            logger.exception("Failed to create index %s: %s", index, exc)
            raise


async def drop_indices(es: Elasticsearch) -> None:
    for index in catalog_indices():
        try:
            await asyncio.to_thread(es.indices.delete, index=index)
        except NotFoundError:
            continue


async def index_is_empty(es: Elasticsearch) -> bool:
    try:
        stats = await asyncio.to_thread(es.count, index=settings.es_index)
        return stats.get("count", 0) == 0
    except NotFoundError:
        return True
