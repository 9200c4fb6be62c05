"""Elasticsearch catalog, importer and index helpers against a mocked client."""

from unittest.mock import MagicMock

import pytest
from elasticsearch import ConnectionError as ESConnectionError
from elasticsearch import NotFoundError

from conftest import CATALOG
from livesearch import importer, indexing
from livesearch.catalog import ElasticCatalog
from livesearch.config import settings
from livesearch.exceptions import CatalogUnavailableError


def _hits(*sources):
    return {"hits": {"hits": [{"_source": source} for source in sources]}}


def test_term_search_filters_taxonomy_count_and_substring():
    client = MagicMock()
    client.search.return_value = _hits({"name": "Rolex", "slug": "rolex", "count": 12})
    catalog = ElasticCatalog(client)

    terms = catalog.search_terms("lux_g_brand", "ro*l", 6)

    assert terms == [{"name": "Rolex", "slug": "rolex", "count": 12}]
    kwargs = client.search.call_args.kwargs
    assert kwargs["index"] == settings.es_terms_index
    assert kwargs["size"] == 6
    filters = kwargs["query"]["bool"]["filter"]
    assert {"term": {"taxonomy": "lux_g_brand"}} in filters
    assert {"range": {"count": {"gt": 0}}} in filters
    wildcard = filters[2]["wildcard"]["name.keyword"]
    assert wildcard["value"] == "*ro\\*l*"
    assert wildcard["case_insensitive"] is True


def test_product_search_applies_category_and_visibility():
    client = MagicMock()
    client.search.return_value = _hits({"id": 101, "title": "Rolex Submariner"})
    catalog = ElasticCatalog(client)

    products = catalog.search_products("rol", 8, category="watches", exclude_visibility="exclude-from-search")

    assert products == [{"id": 101, "title": "Rolex Submariner"}]
    query = client.search.call_args.kwargs["query"]["bool"]
    assert {"term": {"status": "publish"}} in query["filter"]
    assert {"term": {"categories": "watches"}} in query["filter"]
    assert query["must_not"] == [{"term": {"visibility": "exclude-from-search"}}]


def test_product_search_without_category_or_flag():
    client = MagicMock()
    client.search.return_value = _hits()
    ElasticCatalog(client).search_products("rol", 8)

    query = client.search.call_args.kwargs["query"]["bool"]
    assert query["filter"] == [{"term": {"status": "publish"}}]
    assert query["must_not"] == []


def test_connection_failure_becomes_catalog_unavailable():
    client = MagicMock()
    client.search.side_effect = ESConnectionError("down")

    with pytest.raises(CatalogUnavailableError):
        ElasticCatalog(client).search_terms("lux_g_brand", "rol", 6)


def test_lookup_failures_become_catalog_unavailable():
    client = MagicMock()
    client.exists.side_effect = ESConnectionError("refused")
    client.count.side_effect = ESConnectionError("refused")
    catalog = ElasticCatalog(client)

    with pytest.raises(CatalogUnavailableError):
        catalog.taxonomy_exists("lux_g_brand")
    with pytest.raises(CatalogUnavailableError):
        catalog.term_exists("product_visibility", "exclude-from-search")


def test_missing_index_becomes_catalog_unavailable():
    client = MagicMock()
    client.search.side_effect = NotFoundError("index_not_found_exception", meta=MagicMock(status=404), body={})

    with pytest.raises(CatalogUnavailableError):
        ElasticCatalog(client).search_products("rol", 8)


def test_taxonomy_lookup_uses_registry_index():
    client = MagicMock()
    client.exists.return_value = True
    catalog = ElasticCatalog(client)

    assert catalog.taxonomy_exists("pa_brand_collection") is True
    client.exists.assert_called_once_with(index=settings.es_taxonomies_index, id="pa_brand_collection")
    assert catalog.taxonomy_exists("") is False


def test_importer_emits_one_action_per_document():
    actions = list(importer._iter_actions(CATALOG))

    by_index = {}
    for action in actions:
        by_index.setdefault(action["_index"], []).append(action)
    assert len(by_index[settings.es_taxonomies_index]) == len(CATALOG["taxonomies"])
    assert len(by_index[settings.es_terms_index]) == len(CATALOG["terms"])
    assert len(by_index[settings.es_index]) == len(CATALOG["products"])

    product = next(a["_source"] for a in by_index[settings.es_index] if a["_id"] == 101)
    assert product["price"] == "10250"
    assert product["categories"] == ["watches"]
    assert "price_html" not in product


@pytest.mark.asyncio
async def test_ensure_indices_creates_only_missing_indices():
    client = MagicMock()
    client.indices.exists.side_effect = lambda index: index == settings.es_index

    await indexing.ensure_indices(client)

    created = [call.kwargs["index"] for call in client.indices.create.call_args_list]
    assert created == [settings.es_terms_index, settings.es_taxonomies_index]
