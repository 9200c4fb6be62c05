"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    es_host: str = _get_env("ES_HOST", "http://localhost:9200")
    es_index: str = _get_env("ES_INDEX", "products")
    es_request_timeout: float = float(_get_env("ES_REQUEST_TIMEOUT", "5"))
    es_terms_index: str = _get_env("ES_TERMS_INDEX", "catalog-terms")
    es_taxonomies_index: str = _get_env("ES_TAXONOMIES_INDEX", "catalog-taxonomies")
    catalog_backend: str = _get_env("CATALOG_BACKEND", "elasticsearch")
    catalog_path: str = _get_env("CATALOG_PATH", "catalog.json")
    load_on_startup: bool = _get_env("LOAD_ON_STARTUP", "true").lower() in {"1", "true", "yes"}
    redis_host: str = _get_env("REDIS_HOST", "localhost")
    redis_port: int = int(_get_env("REDIS_PORT", "6379"))
    cache_ttl_seconds: int = int(_get_env("CACHE_TTL_SECONDS", "60"))
    nonce_secret: str = _get_env("NONCE_SECRET", "livesearch-dev-secret")
    nonce_lifetime_seconds: int = int(_get_env("NONCE_LIFETIME_SECONDS", "86400"))
    site_url: str = _get_env("SITE_URL", "http://localhost:8000")
    placeholder_image_url: str = _get_env(
        "PLACEHOLDER_IMAGE_URL", "http://localhost:8000/static/placeholder.png"
    )
    currency_symbol: str = _get_env("CURRENCY_SYMBOL", "$")
    price_decimals: int = int(_get_env("PRICE_DECIMALS", "2"))
    debounce_ms: int = int(_get_env("DEBOUNCE_MS", "250"))
    log_level: str = _get_env("LOG_LEVEL", "INFO")


# Server-side floor for the query length, independent of the widget's min_chars.
MIN_QUERY_LENGTH = 2
MIN_LIMIT = 1
MAX_LIMIT = 50
DEFAULT_TERM_LIMIT = 6
DEFAULT_PRODUCT_LIMIT = 8
DEFAULT_WATCH_CATEGORY = "watches"
DEFAULT_COLLECTIONS_ATTR = "brand_collection"
DEFAULT_BRANDS_ATTR = "lux_g_brand"
DEFAULT_REFS_ATTR = "lux_g_referencenumber"
ATTRIBUTE_TAXONOMY_PREFIX = "pa_"
VISIBILITY_TAXONOMY = "product_visibility"
EXCLUDE_FROM_SEARCH = "exclude-from-search"
NONCE_ACTION = "live_search"

settings = Settings()
