"""Exception hierarchy for the live search service and widget client.

Callers discriminate on these to pick the response envelope (server) or the
message shown in the results panel (client).
"""

from __future__ import annotations


class LiveSearchError(Exception):
    """Base class for all live search exceptions."""


class CatalogUnavailableError(LiveSearchError):
    """Raised when the product catalog backend is not active or unreachable."""


class InvalidNonceError(LiveSearchError):
    """Raised when a request carries a missing or stale anti-forgery token."""


class TransportError(LiveSearchError):
    """Raised by the widget client when a request fails or cannot be decoded."""
