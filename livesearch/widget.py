"""Widget configuration, per-request query and the widget's view model.

``WidgetView`` holds exactly the state the browser widget exposes: one list
slot per result category, the aggregate empty-state message, the loading and
expanded flags of the results container, and which tab/panel pair is active.
Controllers and the renderer mutate it; nothing else owns document structure.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .config import (
    DEFAULT_BRANDS_ATTR,
    DEFAULT_COLLECTIONS_ATTR,
    DEFAULT_PRODUCT_LIMIT,
    DEFAULT_REFS_ATTR,
    DEFAULT_TERM_LIMIT,
    DEFAULT_WATCH_CATEGORY,
    MIN_QUERY_LENGTH,
    NONCE_ACTION,
)
from .text import LEADING_INT_PATTERN

SECTIONS = ("collections", "brands", "references", "products")
TABS = ("watches", "jewelry")
DEFAULT_TAB = "watches"
EMPTY_MESSAGE = "No results found"
NETWORK_ERROR_MESSAGE = "Network error"
FAILURE_MESSAGE = "Something went wrong"
JEWELRY_PLACEHOLDER = "Jewelry results are not available yet."


def _dataset_int(dataset: Mapping[str, str], key: str, default: int) -> int:
    match = LEADING_INT_PATTERN.match(dataset.get(key) or "")
    return int(match.group(1)) if match else default


@dataclass(frozen=True)
class WidgetConfig:
    min_chars: int = MIN_QUERY_LENGTH
    term_limit: int = DEFAULT_TERM_LIMIT
    product_limit: int = DEFAULT_PRODUCT_LIMIT
    watch_cat: str = DEFAULT_WATCH_CATEGORY
    collections_attr: str = DEFAULT_COLLECTIONS_ATTR
    brands_attr: str = DEFAULT_BRANDS_ATTR
    refs_attr: str = DEFAULT_REFS_ATTR
    show_price: bool = True
    show_image: bool = True

    @classmethod
    def from_dataset(cls, dataset: Mapping[str, str]) -> "WidgetConfig":
        """Build a config from ``data-*`` attributes (prefix optional)."""
        data = {key[5:] if key.startswith("data-") else key: value for key, value in dataset.items()}
        return cls(
            min_chars=_dataset_int(data, "min-chars", MIN_QUERY_LENGTH),
            term_limit=_dataset_int(data, "term-limit", DEFAULT_TERM_LIMIT),
            product_limit=_dataset_int(data, "product-limit", DEFAULT_PRODUCT_LIMIT),
            watch_cat=data.get("watch-cat") or DEFAULT_WATCH_CATEGORY,
            collections_attr=data.get("collections-attr") or DEFAULT_COLLECTIONS_ATTR,
            brands_attr=data.get("brands-attr") or DEFAULT_BRANDS_ATTR,
            refs_attr=data.get("refs-attr") or DEFAULT_REFS_ATTR,
            show_price=data.get("show-price") == "1",
            show_image=data.get("show-image") == "1",
        )


@dataclass(frozen=True)
class SearchQuery:
    text: str
    min_chars: int
    term_limit: int
    product_limit: int
    watch_category_slug: str
    collections_attr: str
    brands_attr: str
    refs_attr: str

    @classmethod
    def from_config(cls, text: str, config: WidgetConfig) -> "SearchQuery":
        return cls(
            text=text,
            min_chars=config.min_chars,
            term_limit=config.term_limit,
            product_limit=config.product_limit,
            watch_category_slug=config.watch_cat,
            collections_attr=config.collections_attr,
            brands_attr=config.brands_attr,
            refs_attr=config.refs_attr,
        )

    def to_form(self, nonce: str) -> Dict[str, str]:
        return {
            "action": NONCE_ACTION,
            "nonce": nonce,
            "q": self.text,
            "term_limit": str(self.term_limit),
            "product_limit": str(self.product_limit),
            "watch_cat": self.watch_category_slug,
            "collections_attr": self.collections_attr,
            "brands_attr": self.brands_attr,
            "refs_attr": self.refs_attr,
        }


@dataclass
class Section:
    name: str
    hidden: bool = False
    rows: List[str] = field(default_factory=list)

    @property
    def html(self) -> str:
        return "".join(self.rows)

    def fill(self, rows: List[str]) -> None:
        self.hidden = False
        self.rows = list(rows)

    def clear(self) -> None:
        self.rows = []

    def hide(self) -> None:
        self.hidden = True
        self.rows = []


@dataclass
class WidgetView:
    widget_id: str
    loading: bool = False
    shown: bool = False
    aria_expanded: str = "false"
    empty_message: str = EMPTY_MESSAGE
    empty_visible: bool = False
    active_tab: Optional[str] = DEFAULT_TAB
    jewelry_message: str = JEWELRY_PLACEHOLDER
    sections: Dict[str, Section] = field(default_factory=lambda: {name: Section(name) for name in SECTIONS})

    def set_loading(self, on: bool) -> None:
        self.loading = bool(on)

    def show_results(self) -> None:
        self.shown = True
        self.aria_expanded = "true"

    def hide_results(self) -> None:
        """Collapse the panel and empty every list; section structure stays."""
        self.shown = False
        self.aria_expanded = "false"
        for section in self.sections.values():
            section.clear()
        self.empty_visible = False

    def show_message(self, text: str) -> None:
        self.empty_message = text
        self.empty_visible = True
        self.show_results()

    def switch_tab(self, tab: str) -> None:
        self.active_tab = tab if tab in TABS else None

    def tab_selected(self, tab: str) -> bool:
        return self.active_tab == tab

    def panel_active(self, panel: str) -> bool:
        return self.active_tab == panel

    def row_count(self) -> int:
        return sum(len(section.rows) for section in self.sections.values() if not section.hidden)
