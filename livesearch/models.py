"""Pydantic models for request/response payloads."""
from __future__ import annotations

from typing import Any, Dict, Union

from pydantic import BaseModel, Field


class TermResult(BaseModel):
    id: int
    name: str
    slug: str
    url: str
    count: int = 0


class ProductResult(BaseModel):
    id: int
    title: str
    url: str
    price_html: str = ""
    thumbnail: str = ""


class WatchesResults(BaseModel):
    collections: list[TermResult] = Field(default_factory=list)
    brands: list[TermResult] = Field(default_factory=list)
    references: list[TermResult] = Field(default_factory=list)
    products: list[ProductResult] = Field(default_factory=list)

    def total(self) -> int:
        return len(self.collections) + len(self.brands) + len(self.references) + len(self.products)


class SearchResponse(BaseModel):
    watches: WatchesResults = Field(default_factory=WatchesResults)
    # Reserved for the jewelry tab; always an empty object for now.
    jewelry: Dict[str, Any] = Field(default_factory=dict)


class ErrorMessage(BaseModel):
    message: str


class Envelope(BaseModel):
    success: bool
    data: Union[SearchResponse, ErrorMessage]


class SearchParams(BaseModel):
    """Normalized search input as seen by the aggregator."""

    q: str
    term_limit: int
    product_limit: int
    watch_cat: str
    collections_attr: str
    brands_attr: str
    refs_attr: str


class NonceResponse(BaseModel):
    nonce: str
    search_url: str
