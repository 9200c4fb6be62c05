"""Elasticsearch client factory for the catalog indices.

The catalog works against the official synchronous client; the aggregator
moves each blocking call onto a worker thread with ``asyncio.to_thread``.
"""
from __future__ import annotations

import logging
from functools import lru_cache

from elasticsearch import Elasticsearch

from .config import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_client() -> Elasticsearch:
    logger.info(
        "Connecting to Elasticsearch at %s (timeout=%ss)", settings.es_host, settings.es_request_timeout
    )
    return Elasticsearch(settings.es_host, request_timeout=settings.es_request_timeout)
