"""Input normalization helpers shared by the aggregator and the widget.

The search endpoint accepts free text plus a handful of slug-like identifiers.
Free text is reduced to a single trimmed line without markup; identifiers are
folded to lowercase ASCII slugs so ``"Brand Collection"`` and
``"brand-collection"`` address the same taxonomy.
"""
from __future__ import annotations

import hashlib
import json
import re
from typing import Any, Mapping, Optional

from unidecode import unidecode

TAG_PATTERN = re.compile(r"<[^>]*>")
OCTET_PATTERN = re.compile(r"%[a-fA-F0-9]{2}")
WHITESPACE_PATTERN = re.compile(r"[\r\n\t ]+")
SLUG_STRIP_PATTERN = re.compile(r"[^a-z0-9 _-]")
DASH_RUN_PATTERN = re.compile(r"-+")
LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")


def sanitize_text_field(value: Optional[str]) -> str:
    """Strip tags and percent-encoded octets, collapse whitespace and trim."""
    if not value:
        return ""
    text = TAG_PATTERN.sub("", str(value))
    text = OCTET_PATTERN.sub("", text)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def sanitize_title(value: Optional[str]) -> str:
    """Fold a human-readable title into a slug (``"Montres d'été"`` -> ``"montres-dete"``)."""
    if not value:
        return ""
    slug = unidecode(TAG_PATTERN.sub("", str(value))).lower()
    slug = SLUG_STRIP_PATTERN.sub("", slug)
    slug = WHITESPACE_PATTERN.sub("-", slug.strip())
    return DASH_RUN_PATTERN.sub("-", slug).strip("-")


def parse_int(value: Any) -> int:
    """Leading-integer conversion: ``"12abc"`` -> 12, ``"abc"`` -> 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if value is None:
        return 0
    match = LEADING_INT_PATTERN.match(str(value))
    return int(match.group(1)) if match else 0


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def hash_params(params: Mapping[str, Any]) -> str:
    """Stable cache key for a normalized parameter set."""
    payload = json.dumps(dict(params), sort_keys=True, ensure_ascii=False)
    return "livesearch:" + hashlib.sha1(payload.encode("utf-8")).hexdigest()
