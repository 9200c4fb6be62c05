"""Response cache for aggregated searches: Redis primary, in-memory fallback.

Keystroke-driven traffic repeats the same prefixes ("ro", "rol", "role") across
visitors, so aggregated payloads are kept for a short TTL keyed by the
normalized parameters.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import redis

from .config import settings
from .models import SearchParams, SearchResponse
from .text import hash_params

logger = logging.getLogger(__name__)


class CacheBackend(Protocol):
    def get(self, key: str) -> Optional[Dict[str, Any]]: ...

    def set(self, key: str, value: Dict[str, Any], ttl: int) -> None: ...


@dataclass
class RedisCache:
    client: redis.Redis

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            data = self.client.get(key)
        except redis.RedisError as exc:
            logger.warning("Redis get failed for %s: %s", key, exc)
            return None
        if not data:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    def set(self, key: str, value: Dict[str, Any], ttl: int) -> None:
        try:
            self.client.setex(key, ttl, json.dumps(value))
        except redis.RedisError as exc:
            logger.warning("Redis set failed for %s: %s", key, exc)


class InMemoryCache:
    def __init__(self) -> None:
        self._store: Dict[str, tuple[float, Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._store.get(key)
            if not entry:
                return None
            expires_at, payload = entry
            if expires_at < time.time():
                self._store.pop(key, None)
                return None
            return payload

    def set(self, key: str, value: Dict[str, Any], ttl: int) -> None:
        with self._lock:
            self._store[key] = (time.time() + ttl, value)


def load_cached(cache: CacheBackend, params: SearchParams) -> Optional[SearchResponse]:
    payload = cache.get(hash_params(params.model_dump()))
    if payload is None:
        return None
    logger.debug("cache_hit q=%r", params.q)
    return SearchResponse.model_validate(payload)


def store_cached(cache: CacheBackend, params: SearchParams, response: SearchResponse) -> None:
    if settings.cache_ttl_seconds <= 0:
        return
    cache.set(hash_params(params.model_dump()), response.model_dump(), settings.cache_ttl_seconds)
    logger.debug("cache_store q=%r ttl=%s", params.q, settings.cache_ttl_seconds)


_cache: CacheBackend | None = None


def get_cache() -> CacheBackend:
    global _cache
    if _cache is not None:
        return _cache
    try:
        client = redis.Redis(host=settings.redis_host, port=settings.redis_port, decode_responses=False)
        client.ping()
        logger.info("Using Redis cache at %s:%s", settings.redis_host, settings.redis_port)
        _cache = RedisCache(client)
    except redis.RedisError:
        logger.warning("Redis not available, using in-memory cache")
        _cache = InMemoryCache()
    return _cache
