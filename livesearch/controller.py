"""Request controller for one search widget.

Input events arrive through ``on_input``/``on_keydown``/``on_tab_click`` and
``on_document_click``; searches are debounced and dispatched as asyncio tasks.
Each dispatch takes a sequence number and only the response of the latest
dispatch may touch the view. Several widgets on one page are held by a
``WidgetPage``, each with its own controller and no shared state.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Set

from pydantic import ValidationError

from .config import settings
from .debounce import Debouncer
from .exceptions import TransportError
from .models import SearchResponse
from .renderer import RenderOptions, ResultRenderer
from .transport import SearchTransport
from .widget import (
    DEFAULT_TAB,
    FAILURE_MESSAGE,
    NETWORK_ERROR_MESSAGE,
    SearchQuery,
    WidgetConfig,
    WidgetView,
)

logger = logging.getLogger(__name__)

ESCAPE_KEY = "Escape"


class SearchController:
    def __init__(
        self,
        view: WidgetView,
        config: WidgetConfig,
        transport: SearchTransport,
        *,
        quiet_period: Optional[float] = None,
    ) -> None:
        self.view = view
        self.config = config
        self.transport = transport
        self.renderer = ResultRenderer(RenderOptions(show_price=config.show_price, show_image=config.show_image))
        wait = settings.debounce_ms / 1000 if quiet_period is None else quiet_period
        self._debouncer = Debouncer(self._dispatch, wait)
        self._seq = 0
        self._tasks: Set[asyncio.Task] = set()

    @property
    def widget_id(self) -> str:
        return self.view.widget_id

    def on_input(self, text: str) -> None:
        self._debouncer(text or "")

    def on_keydown(self, key: str) -> None:
        if key == ESCAPE_KEY:
            self.view.hide_results()

    def on_document_click(self, inside: bool) -> None:
        if not inside:
            self.view.hide_results()

    def on_tab_click(self, tab: str) -> None:
        self.view.switch_tab(tab)

    def _dispatch(self, text: str) -> None:
        task = asyncio.get_running_loop().create_task(self.search(text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for the pending debounce timer and every dispatched search to settle."""
        while self._debouncer.pending or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            else:
                await asyncio.sleep(self._debouncer.wait)

    def _is_current(self, seq: int) -> bool:
        return seq == self._seq

    async def search(self, text: str) -> None:
        term = text.strip()
        self._seq += 1
        seq = self._seq
        if len(term) < self.config.min_chars:
            # Invalidates any in-flight request as well.
            self.view.set_loading(False)
            self.view.hide_results()
            return

        self.view.set_loading(True)
        try:
            envelope = await self.transport.search(SearchQuery.from_config(term, self.config))
            if not self._is_current(seq):
                logger.debug("Discarding stale response seq=%s latest=%s q=%r", seq, self._seq, term)
                return
            if not envelope.get("success"):
                self.view.show_message(FAILURE_MESSAGE)
                return
            payload = SearchResponse.model_validate(envelope.get("data") or {})
            self.renderer.render(self.view, payload)
            self.view.switch_tab(DEFAULT_TAB)
        except (TransportError, ValidationError) as exc:
            if self._is_current(seq):
                logger.warning("Search failed q=%r: %s", term, exc)
                self.view.show_message(NETWORK_ERROR_MESSAGE)
        finally:
            if self._is_current(seq):
                self.view.set_loading(False)


class WidgetPage:
    """Independent controllers for every widget found on one page."""

    def __init__(self, controllers: Iterable[SearchController]) -> None:
        self.controllers: Dict[str, SearchController] = {c.widget_id: c for c in controllers}

    @classmethod
    def from_datasets(
        cls,
        datasets: Mapping[str, Mapping[str, str]],
        transport: SearchTransport,
        *,
        quiet_period: Optional[float] = None,
    ) -> "WidgetPage":
        controllers: List[SearchController] = [
            SearchController(
                WidgetView(widget_id=widget_id),
                WidgetConfig.from_dataset(dataset),
                transport,
                quiet_period=quiet_period,
            )
            for widget_id, dataset in datasets.items()
        ]
        return cls(controllers)

    def __getitem__(self, widget_id: str) -> SearchController:
        return self.controllers[widget_id]

    def click(self, widget_id: Optional[str]) -> None:
        """Document click; ``widget_id`` is the widget containing the target, if any."""
        for controller in self.controllers.values():
            controller.on_document_click(inside=controller.widget_id == widget_id)

    async def drain(self) -> None:
        for controller in self.controllers.values():
            await controller.drain()
