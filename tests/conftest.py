"""Shared fixtures: a small watch catalog served by the in-memory backend."""

import copy

import pytest
from fastapi.testclient import TestClient

from livesearch.cache import InMemoryCache, get_cache
from livesearch.catalog import InMemoryCatalog, get_catalog

CATALOG = {
    "taxonomies": [
        "pa_brand_collection",
        "lux_g_brand",
        "pa_lux_g_referencenumber",
        "product_cat",
        "product_visibility",
    ],
    "terms": [
        {"id": 1, "taxonomy": "lux_g_brand", "name": "Rolex", "slug": "rolex", "count": 12},
        {"id": 2, "taxonomy": "lux_g_brand", "name": "Omega", "slug": "omega", "count": 5},
        {"id": 3, "taxonomy": "lux_g_brand", "name": "Rolling Stones", "slug": "rolling-stones", "count": 0},
        {
            "id": 4,
            "taxonomy": "pa_brand_collection",
            "name": "Rolex Submariner",
            "slug": "rolex-submariner",
            "count": 4,
            "url": "https://shop.example/collection/rolex-submariner/",
        },
        {"id": 5, "taxonomy": "pa_brand_collection", "name": "Seamaster", "slug": "seamaster", "count": 3},
        {"id": 6, "taxonomy": "pa_lux_g_referencenumber", "name": "126610LN", "slug": "126610ln", "count": 2},
        {
            "id": 7,
            "taxonomy": "product_visibility",
            "name": "exclude-from-search",
            "slug": "exclude-from-search",
            "count": 1,
        },
    ],
    "products": [
        {
            "id": 101,
            "title": "Rolex Submariner Date 126610LN",
            "status": "publish",
            "categories": ["watches"],
            "price": "10250",
            "thumbnail": "https://shop.example/img/101.jpg",
            "url": "https://shop.example/product/rolex-submariner-date/",
        },
        {
            "id": 102,
            "title": "Rolex Datejust 36",
            "status": "publish",
            "categories": ["watches"],
            "price_html": "<span class=\"range\">From $8,000</span>",
            "slug": "rolex-datejust-36",
        },
        {
            "id": 103,
            "title": "Rolex Bracelet Polish Kit",
            "status": "publish",
            "categories": ["accessories"],
            "price": "49",
        },
        {
            "id": 104,
            "title": "Rolex Daytona Hidden",
            "status": "publish",
            "categories": ["watches"],
            "visibility": ["exclude-from-search"],
        },
        {"id": 105, "title": "Rolex GMT Draft", "status": "draft", "categories": ["watches"]},
        {
            "id": 106,
            "title": "Omega Speedmaster",
            "status": "publish",
            "categories": ["watches"],
            "excerpt": "Moonwatch chronograph",
        },
    ],
}


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog.from_dict(copy.deepcopy(CATALOG))


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def client(catalog, cache):
    """FastAPI test client bound to the in-memory catalog and cache."""
    from livesearch.main import app

    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_cache] = lambda: cache
    yield TestClient(app)
    app.dependency_overrides.clear()
