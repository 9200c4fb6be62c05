"""Search aggregation: taxonomy terms plus products for the watches tab.

One request fans out into three term lookups (collections, brands, reference
numbers) and one product lookup. Each lookup is bounded by its limit and runs
on a worker thread because the catalog clients are synchronous.
"""
from __future__ import annotations

import asyncio
import logging
import math
from time import perf_counter
from typing import Any, Callable, Iterable, List, Mapping, Optional

from .catalog import CatalogBackend
from .config import (
    ATTRIBUTE_TAXONOMY_PREFIX,
    DEFAULT_BRANDS_ATTR,
    DEFAULT_COLLECTIONS_ATTR,
    DEFAULT_PRODUCT_LIMIT,
    DEFAULT_REFS_ATTR,
    DEFAULT_TERM_LIMIT,
    DEFAULT_WATCH_CATEGORY,
    EXCLUDE_FROM_SEARCH,
    MAX_LIMIT,
    MIN_LIMIT,
    MIN_QUERY_LENGTH,
    VISIBILITY_TAXONOMY,
    settings,
)
from .models import ProductResult, SearchParams, SearchResponse, TermResult, WatchesResults
from .text import clamp, parse_int, sanitize_text_field, sanitize_title

logger = logging.getLogger(__name__)


def _limit(raw: Any, default: int) -> int:
    if raw is None:
        return default
    return clamp(parse_int(raw), MIN_LIMIT, MAX_LIMIT)


def _slug(raw: Optional[str], default: str) -> str:
    return default if raw is None else sanitize_title(raw)


def parse_params(raw: Mapping[str, Any]) -> SearchParams:
    """Normalize request fields; missing fields fall back to the widget defaults."""
    return SearchParams(
        q=sanitize_text_field(raw.get("q")),
        term_limit=_limit(raw.get("term_limit"), DEFAULT_TERM_LIMIT),
        product_limit=_limit(raw.get("product_limit"), DEFAULT_PRODUCT_LIMIT),
        watch_cat=_slug(raw.get("watch_cat"), DEFAULT_WATCH_CATEGORY),
        collections_attr=_slug(raw.get("collections_attr"), DEFAULT_COLLECTIONS_ATTR),
        brands_attr=_slug(raw.get("brands_attr"), DEFAULT_BRANDS_ATTR),
        refs_attr=_slug(raw.get("refs_attr"), DEFAULT_REFS_ATTR),
    )


def is_short_query(params: SearchParams) -> bool:
    return len(params.q) < MIN_QUERY_LENGTH


def resolve_taxonomy(catalog: CatalogBackend, identifier: str) -> Optional[str]:
    """Accept attribute identifiers with or without the ``pa_`` namespace."""
    if catalog.taxonomy_exists(identifier):
        return identifier
    prefixed = ATTRIBUTE_TAXONOMY_PREFIX + identifier.lstrip("_")
    if catalog.taxonomy_exists(prefixed):
        return prefixed
    return None


def first_available(*candidates: Callable[[], Optional[str]]) -> str:
    """Evaluate candidates in order and return the first non-empty value."""
    for candidate in candidates:
        value = candidate()
        if value:
            return value
    return ""


def format_price(price: Any) -> Optional[str]:
    if price is None or price == "":
        return None
    try:
        amount = float(price)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount):
        return None
    formatted = f"{amount:,.{settings.price_decimals}f}"
    return (
        '<span class="woocommerce-Price-amount amount"><bdi>'
        f'<span class="woocommerce-Price-currencySymbol">{settings.currency_symbol}</span>'
        f"{formatted}</bdi></span>"
    )


def price_markup(product: Mapping[str, Any]) -> str:
    return first_available(
        lambda: format_price(product.get("price")),
        lambda: product.get("price_html"),
    )


def thumbnail_url(product: Mapping[str, Any]) -> str:
    return first_available(
        lambda: product.get("thumbnail"),
        lambda: settings.placeholder_image_url,
    )


def term_link(term: Mapping[str, Any], taxonomy: str) -> Optional[str]:
    if term.get("url"):
        return str(term["url"])
    slug = term.get("slug")
    if not slug:
        return None
    return f"{settings.site_url.rstrip('/')}/{taxonomy}/{slug}/"


def product_link(product: Mapping[str, Any]) -> Optional[str]:
    if product.get("url"):
        return str(product["url"])
    key = product.get("slug") or product.get("id")
    if not key:
        return None
    return f"{settings.site_url.rstrip('/')}/product/{key}/"


def _to_term_results(terms: Iterable[Mapping[str, Any]], taxonomy: str) -> List[TermResult]:
    out: List[TermResult] = []
    for term in terms:
        link = term_link(term, taxonomy)
        if link is None:
            logger.debug("Skipping term without link taxonomy=%s term=%r", taxonomy, term.get("name"))
            continue
        out.append(
            TermResult(
                id=int(term.get("id") or 0),
                name=str(term.get("name", "")),
                slug=str(term.get("slug", "")),
                url=link,
                count=int(term.get("count") or 0),
            )
        )
    return out


def _to_product_results(products: Iterable[Mapping[str, Any]]) -> List[ProductResult]:
    out: List[ProductResult] = []
    for product in products:
        link = product_link(product)
        if link is None:
            logger.debug("Skipping product without link title=%r", product.get("title"))
            continue
        out.append(
            ProductResult(
                id=int(product.get("id") or 0),
                title=str(product.get("title", "")),
                url=link,
                price_html=price_markup(product),
                thumbnail=thumbnail_url(product),
            )
        )
    return out


async def collect_terms(catalog: CatalogBackend, identifier: str, q: str, limit: int) -> List[TermResult]:
    taxonomy = await asyncio.to_thread(resolve_taxonomy, catalog, identifier)
    if taxonomy is None:
        logger.info("Taxonomy %r is not registered; returning no terms", identifier)
        return []
    terms = await asyncio.to_thread(catalog.search_terms, taxonomy, q, limit)
    return _to_term_results(terms, taxonomy)[:limit]


async def collect_products(catalog: CatalogBackend, params: SearchParams) -> List[ProductResult]:
    has_flag = await asyncio.to_thread(catalog.term_exists, VISIBILITY_TAXONOMY, EXCLUDE_FROM_SEARCH)
    products = await asyncio.to_thread(
        catalog.search_products,
        params.q,
        params.product_limit,
        category=params.watch_cat or None,
        exclude_visibility=EXCLUDE_FROM_SEARCH if has_flag else None,
    )
    return _to_product_results(products)[: params.product_limit]


async def search(catalog: CatalogBackend, params: SearchParams) -> SearchResponse:
    if is_short_query(params):
        return SearchResponse()

    t0 = perf_counter()
    collections, brands, references, products = await asyncio.gather(
        collect_terms(catalog, params.collections_attr, params.q, params.term_limit),
        collect_terms(catalog, params.brands_attr, params.q, params.term_limit),
        collect_terms(catalog, params.refs_attr, params.q, params.term_limit),
        collect_products(catalog, params),
    )
    total_ms = (perf_counter() - t0) * 1000
    logger.info(
        "search q=%r collections=%s brands=%s references=%s products=%s took=%.2fms",
        params.q,
        len(collections),
        len(brands),
        len(references),
        len(products),
        total_ms,
    )
    return SearchResponse(
        watches=WatchesResults(
            collections=collections,
            brands=brands,
            references=references,
            products=products,
        )
    )