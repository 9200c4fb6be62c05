"""Turns a search payload into per-category rows on a ``WidgetView``."""
from __future__ import annotations

import html
from dataclasses import dataclass
from typing import List, Protocol, Sequence, TypeVar

from .models import ProductResult, SearchResponse, TermResult
from .widget import EMPTY_MESSAGE, Section, WidgetView

ItemT = TypeVar("ItemT")
ItemT_contra = TypeVar("ItemT_contra", contravariant=True)


def escape_html(value: str) -> str:
    return html.escape(value, quote=True)


class RowRenderer(Protocol[ItemT_contra]):
    def render_row(self, item: ItemT_contra) -> str: ...


class TermRowRenderer:
    def render_row(self, item: TermResult) -> str:
        badge = str(item.count) if item.count else ""
        return (
            f'<a class="wcls-row wcls-term" role="option" href="{item.url}">'
            f'<span class="wcls-title">{escape_html(item.name)}</span>'
            f'<span class="wcls-badge">{badge}</span>'
            "</a>"
        )


@dataclass(frozen=True)
class RenderOptions:
    show_price: bool = True
    show_image: bool = True


class ProductRowRenderer:
    def __init__(self, options: RenderOptions) -> None:
        self.options = options

    def render_row(self, item: ProductResult) -> str:
        img = ""
        if self.options.show_image and item.thumbnail:
            img = f'<img class="wcls-thumb" src="{item.thumbnail}" alt="">'
        price = ""
        if self.options.show_price and item.price_html:
            price = f'<div class="wcls-price">{item.price_html}</div>'
        return (
            f'<a class="wcls-row wcls-product" role="option" href="{item.url}">'
            f"{img}"
            f'<div class="wcls-title">{escape_html(item.title)}</div>'
            f"{price}"
            "</a>"
        )


def render_section(section: Section, items: Sequence[ItemT], renderer: RowRenderer[ItemT]) -> int:
    """Fill ``section`` with one row per item; hide it when there are none."""
    if not items:
        section.hide()
        return 0
    rows: List[str] = [renderer.render_row(item) for item in items]
    section.fill(rows)
    return len(rows)


class ResultRenderer:
    def __init__(self, options: RenderOptions) -> None:
        self.options = options
        self._terms = TermRowRenderer()
        self._products = ProductRowRenderer(options)

    def render(self, view: WidgetView, payload: SearchResponse) -> int:
        watches = payload.watches
        sections = view.sections
        total = (
            render_section(sections["collections"], watches.collections, self._terms)
            + render_section(sections["brands"], watches.brands, self._terms)
            + render_section(sections["references"], watches.references, self._terms)
            + render_section(sections["products"], watches.products, self._products)
        )

        if total:
            view.empty_visible = False
        else:
            view.empty_message = EMPTY_MESSAGE
            view.empty_visible = True

        view.show_results()
        return total
