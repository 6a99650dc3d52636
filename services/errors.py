"""
Error taxonomy for the sale lifecycle.

Every error carries the HTTP status the API layer answers with. Messages are
meant for server-side logs; routers send generic text to callers.
"""

from __future__ import annotations


class SaleError(Exception):
    """Base class for errors raised while handling a sale."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(SaleError):
    """Required external credentials are missing. Raised before any side effect."""

    status_code = 500


class InvalidRequest(SaleError):
    """A required caller-supplied field is missing or empty."""

    status_code = 400


class PersistenceError(SaleError):
    """The sale store rejected a read or write."""

    status_code = 500


class GatewayError(SaleError):
    """The payment processor call failed or returned an unexpected shape."""

    status_code = 500


class NotFound(SaleError):
    """The requested sale does not exist."""

    status_code = 404
