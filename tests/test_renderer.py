"""Rendering payloads into the widget view."""

from livesearch.models import ProductResult, SearchResponse, TermResult, WatchesResults
from livesearch.renderer import RenderOptions, ResultRenderer
from livesearch.widget import EMPTY_MESSAGE, NETWORK_ERROR_MESSAGE, WidgetView

ROLEX = TermResult(id=1, name="Rolex", slug="rolex", url="https://shop.example/brand/rolex/", count=12)
SUBMARINER = ProductResult(
    id=101,
    title="Rolex Submariner",
    url="https://shop.example/product/sub/",
    price_html='<span class="amount">$10,250.00</span>',
    thumbnail="https://shop.example/img/sub.jpg",
)


def _render(payload, options=RenderOptions()):
    view = WidgetView(widget_id="w1")
    total = ResultRenderer(options).render(view, payload)
    return view, total


def test_single_brand_hides_other_sections():
    view, total = _render(SearchResponse(watches=WatchesResults(brands=[ROLEX])))

    assert total == 1
    assert len(view.sections["brands"].rows) == 1
    assert "Rolex" in view.sections["brands"].html
    assert '<span class="wcls-badge">12</span>' in view.sections["brands"].html
    for name in ("collections", "references", "products"):
        assert view.sections[name].hidden
        assert view.sections[name].html == ""
    assert view.empty_visible is False
    assert view.shown is True
    assert view.aria_expanded == "true"


def test_all_empty_payload_shows_only_empty_message():
    view, total = _render(SearchResponse())

    assert total == 0
    assert all(section.hidden for section in view.sections.values())
    assert view.empty_visible is True
    assert view.empty_message == EMPTY_MESSAGE
    assert view.shown is True


def test_empty_message_text_is_restored_after_an_error():
    view = WidgetView(widget_id="w1")
    view.show_message(NETWORK_ERROR_MESSAGE)
    ResultRenderer(RenderOptions()).render(view, SearchResponse())

    assert view.empty_message == EMPTY_MESSAGE


def test_row_count_matches_payload_and_rendering_is_idempotent():
    payload = SearchResponse(
        watches=WatchesResults(collections=[ROLEX, ROLEX], brands=[ROLEX], products=[SUBMARINER])
    )
    view = WidgetView(widget_id="w1")
    renderer = ResultRenderer(RenderOptions())

    renderer.render(view, payload)
    first = {name: list(section.rows) for name, section in view.sections.items()}
    renderer.render(view, payload)

    assert view.row_count() == payload.watches.total() == 4
    assert {name: section.rows for name, section in view.sections.items()} == first


def test_names_are_escaped_but_urls_and_price_are_verbatim():
    evil_term = ROLEX.model_copy(update={"name": "<script>alert(1)</script>"})
    evil_product = SUBMARINER.model_copy(update={"title": "Sub & <b>Co</b>"})
    view, _ = _render(SearchResponse(watches=WatchesResults(brands=[evil_term], products=[evil_product])))

    brands = view.sections["brands"].html
    assert "<script>" not in brands
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in brands
    products = view.sections["products"].html
    assert "Sub &amp; &lt;b&gt;Co&lt;/b&gt;" in products
    assert 'href="https://shop.example/product/sub/"' in products
    assert '<span class="amount">$10,250.00</span>' in products


def test_product_options_control_image_and_price():
    payload = SearchResponse(watches=WatchesResults(products=[SUBMARINER]))

    with_all, _ = _render(payload, RenderOptions(show_price=True, show_image=True))
    assert "wcls-thumb" in with_all.sections["products"].html
    assert "wcls-price" in with_all.sections["products"].html

    bare, _ = _render(payload, RenderOptions(show_price=False, show_image=False))
    assert "wcls-thumb" not in bare.sections["products"].html
    assert "wcls-price" not in bare.sections["products"].html

    no_thumb = SUBMARINER.model_copy(update={"thumbnail": "", "price_html": ""})
    missing, _ = _render(SearchResponse(watches=WatchesResults(products=[no_thumb])))
    assert "wcls-thumb" not in missing.sections["products"].html
    assert "wcls-price" not in missing.sections["products"].html


def test_zero_count_renders_blank_badge():
    view, _ = _render(SearchResponse(watches=WatchesResults(brands=[ROLEX.model_copy(update={"count": 0})])))

    assert '<span class="wcls-badge"></span>' in view.sections["brands"].html
