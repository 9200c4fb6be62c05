"""Terminal client that drives the widget controller against a running server."""
from __future__ import annotations

import argparse
import asyncio
import logging
import re
from pathlib import Path
from typing import Iterable, List

from livesearch.controller import SearchController
from livesearch.transport import SearchTransport
from livesearch.widget import SECTIONS, WidgetConfig, WidgetView

GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"
TAG_RE = re.compile(r"<[^>]+>")


def _row_text(row: str) -> str:
    return " ".join(TAG_RE.sub(" ", row).split())


def pretty_print_view(query: str, view: WidgetView) -> None:
    color = RED if view.empty_visible else GREEN
    print(f"Query: {query} | rows: {color}{view.row_count()}{RESET} | tab: {view.active_tab}")
    if view.empty_visible:
        print(f"  {view.empty_message}")
    for name in SECTIONS:
        section = view.sections[name]
        if section.hidden or not section.rows:
            continue
        print(f"  [{name}]")
        for idx, row in enumerate(section.rows, start=1):
            print(f"    {idx:02d}. {_row_text(row)}")


async def perform_queries(base_url: str, queries: List[str], config: WidgetConfig) -> None:
    transport = SearchTransport(base_url=base_url)
    await transport.fetch_nonce()
    controller = SearchController(WidgetView(widget_id="cli"), config, transport)
    for query in queries:
        # Feed the query one keystroke at a time, like a typing user.
        for end in range(1, len(query) + 1):
            controller.on_input(query[:end])
        await controller.drain()
        pretty_print_view(query, controller.view)


def interactive_shell(base_url: str, config: WidgetConfig) -> None:
    print("Interactive live search. Type 'exit' to quit.")
    while True:
        try:
            query = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not query:
            continue
        if query.lower() in {"exit", "quit"}:
            return
        asyncio.run(perform_queries(base_url, [query], config))


def batch_mode(base_url: str, file_path: Path, config: WidgetConfig) -> None:
    with file_path.open("r", encoding="utf-8") as fh:
        queries = [line.strip() for line in fh if line.strip()]
    asyncio.run(perform_queries(base_url, queries, config))


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the live search service")
    parser.add_argument("query", nargs="?", help="Query string. If omitted, starts REPL mode.")
    parser.add_argument("--batch", type=Path, help="File with queries to execute line by line")
    parser.add_argument("--url", default="http://localhost:8000", help="Base URL of the search service")
    parser.add_argument("--min-chars", default="2")
    parser.add_argument("--term-limit", default="6")
    parser.add_argument("--product-limit", default="8")
    parser.add_argument("--watch-cat", default="watches")
    parser.add_argument("--no-price", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    config = WidgetConfig.from_dataset(
        {
            "min-chars": args.min_chars,
            "term-limit": args.term_limit,
            "product-limit": args.product_limit,
            "watch-cat": args.watch_cat,
            "show-price": "0" if args.no_price else "1",
            "show-image": "0",
        }
    )

    if args.batch:
        batch_mode(args.url, args.batch, config)
        return 0
    if args.query:
        asyncio.run(perform_queries(args.url, [args.query], config))
        return 0
    interactive_shell(args.url, config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
