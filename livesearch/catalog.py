"""Catalog backends with Elasticsearch primary and an in-memory variant.

Both backends read the same catalog shape: registered taxonomy names, taxonomy
terms (``taxonomy``, ``name``, ``slug``, ``count``) and products (``title``,
``content``, ``excerpt``, ``status``, ``categories``, ``visibility``, pricing
and image fields). The in-memory backend serves development setups and tests.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from elasticsearch import ApiError, Elasticsearch
from elasticsearch import TransportError as ESTransportError

from .config import settings
from .es_client import get_client
from .exceptions import CatalogUnavailableError

logger = logging.getLogger(__name__)

PUBLISHED = "publish"
WILDCARD_SPECIALS = ("\\", "*", "?")
ES_FAILURES = (ESTransportError, ApiError)


class CatalogBackend(Protocol):
    def is_active(self) -> bool: ...

    def taxonomy_exists(self, taxonomy: str) -> bool: ...

    def term_exists(self, taxonomy: str, slug: str) -> bool: ...

    def search_terms(self, taxonomy: str, text: str, limit: int) -> List[Dict[str, Any]]: ...

    def search_products(
        self,
        text: str,
        limit: int,
        *,
        category: Optional[str] = None,
        exclude_visibility: Optional[str] = None,
    ) -> List[Dict[str, Any]]: ...


def load_catalog_file(path: Path) -> Dict[str, list]:
    if not path.exists():
        logger.warning("Catalog file %s is missing", path)
        return {"taxonomies": [], "terms": [], "products": []}
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    return {
        "taxonomies": list(data.get("taxonomies", [])),
        "terms": list(data.get("terms", [])),
        "products": list(data.get("products", [])),
    }


def _escape_wildcard(text: str) -> str:
    for char in WILDCARD_SPECIALS:
        text = text.replace(char, "\\" + char)
    return text


@dataclass
class ElasticCatalog:
    client: Elasticsearch
    products_index: str = settings.es_index
    terms_index: str = settings.es_terms_index
    taxonomies_index: str = settings.es_taxonomies_index

    def is_active(self) -> bool:
        return bool(self.client.ping())

    def taxonomy_exists(self, taxonomy: str) -> bool:
        if not taxonomy:
            return False
        try:
            return bool(self.client.exists(index=self.taxonomies_index, id=taxonomy))
        except ES_FAILURES as exc:
            raise CatalogUnavailableError(f"Taxonomy lookup failed: {exc}") from exc

    def term_exists(self, taxonomy: str, slug: str) -> bool:
        try:
            response = self.client.count(
                index=self.terms_index,
                query={"bool": {"filter": [{"term": {"taxonomy": taxonomy}}, {"term": {"slug": slug}}]}},
            )
        except ES_FAILURES as exc:
            raise CatalogUnavailableError(f"Term lookup failed: {exc}") from exc
        return response.get("count", 0) > 0

    def search_terms(self, taxonomy: str, text: str, limit: int) -> List[Dict[str, Any]]:
        query = {
            "bool": {
                "filter": [
                    {"term": {"taxonomy": taxonomy}},
                    {"range": {"count": {"gt": 0}}},
                    {
                        "wildcard": {
                            "name.keyword": {
                                "value": f"*{_escape_wildcard(text)}*",
                                "case_insensitive": True,
                            }
                        }
                    },
                ]
            }
        }
        logger.debug("ES term query taxonomy=%s payload=%s", taxonomy, query)
        try:
            response = self.client.search(
                index=self.terms_index,
                query=query,
                size=limit,
                sort=[{"name.keyword": "asc"}],
            )
        except ES_FAILURES as exc:
            raise CatalogUnavailableError(f"Term search failed: {exc}") from exc
        return [hit.get("_source", {}) for hit in response.get("hits", {}).get("hits", [])]

    def search_products(
        self,
        text: str,
        limit: int,
        *,
        category: Optional[str] = None,
        exclude_visibility: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        filters: List[dict] = [{"term": {"status": PUBLISHED}}]
        if category:
            filters.append({"term": {"categories": category}})
        must_not: List[dict] = []
        if exclude_visibility:
            must_not.append({"term": {"visibility": exclude_visibility}})

        query = {
            "bool": {
                "should": [
                    {
                        "multi_match": {
                            "query": text,
                            "type": "bool_prefix",
                            "operator": "and",
                            "fields": ["title^3", "title._2gram", "title._3gram"],
                        }
                    },
                    {"match": {"excerpt": {"query": text, "operator": "and"}}},
                    {"match": {"content": {"query": text, "operator": "and"}}},
                ],
                "minimum_should_match": 1,
                "filter": filters,
                "must_not": must_not,
            }
        }
        logger.debug("ES product query payload=%s", query)
        try:
            response = self.client.search(index=self.products_index, query=query, size=limit)
        except ES_FAILURES as exc:
            raise CatalogUnavailableError(f"Product search failed: {exc}") from exc
        return [hit.get("_source", {}) for hit in response.get("hits", {}).get("hits", [])]


@dataclass
class InMemoryCatalog:
    taxonomies: List[str] = field(default_factory=list)
    terms: List[Dict[str, Any]] = field(default_factory=list)
    products: List[Dict[str, Any]] = field(default_factory=list)
    active: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryCatalog":
        return cls(
            taxonomies=list(data.get("taxonomies", [])),
            terms=list(data.get("terms", [])),
            products=list(data.get("products", [])),
        )

    @classmethod
    def from_file(cls, path: Path) -> "InMemoryCatalog":
        return cls.from_dict(load_catalog_file(path))

    def is_active(self) -> bool:
        return self.active

    def taxonomy_exists(self, taxonomy: str) -> bool:
        return bool(taxonomy) and taxonomy in self.taxonomies

    def term_exists(self, taxonomy: str, slug: str) -> bool:
        return any(t.get("taxonomy") == taxonomy and t.get("slug") == slug for t in self.terms)

    def search_terms(self, taxonomy: str, text: str, limit: int) -> List[Dict[str, Any]]:
        needle = text.lower()
        matches = [
            term
            for term in self.terms
            if term.get("taxonomy") == taxonomy
            and int(term.get("count") or 0) > 0
            and needle in str(term.get("name", "")).lower()
        ]
        matches.sort(key=lambda term: str(term.get("name", "")).lower())
        return matches[:limit]

    def search_products(
        self,
        text: str,
        limit: int,
        *,
        category: Optional[str] = None,
        exclude_visibility: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        # Every whitespace-separated word must appear somewhere in the product text.
        words = [word.lower() for word in text.split() if word]
        results: List[Dict[str, Any]] = []
        for product in self.products:
            if product.get("status", PUBLISHED) != PUBLISHED:
                continue
            if category and category not in product.get("categories", []):
                continue
            if exclude_visibility and exclude_visibility in product.get("visibility", []):
                continue
            haystack = " ".join(
                str(product.get(key) or "") for key in ("title", "excerpt", "content")
            ).lower()
            if all(word in haystack for word in words):
                results.append(product)
            if len(results) >= limit:
                break
        return results


@lru_cache(maxsize=1)
def get_catalog() -> CatalogBackend:
    if settings.catalog_backend == "memory":
        logger.info("Using in-memory catalog from %s", settings.catalog_path)
        return InMemoryCatalog.from_file(Path(settings.catalog_path))
    logger.info("Using Elasticsearch catalog at %s", settings.es_host)
    return ElasticCatalog(get_client())
