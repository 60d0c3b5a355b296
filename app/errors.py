"""Error taxonomy shared by the fetch layer, stores and notification dispatch."""

from typing import Optional


class AggregatorError(Exception):
    """Base class for all errors raised by the aggregation pipeline."""


class NetworkError(AggregatorError):
    """An outbound request failed (timeout, DNS, connection reset, non-2xx)."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RateLimitedError(NetworkError):
    """Upstream answered 429/403 and no bypass relay is configured."""


class ValidationError(AggregatorError):
    """A candidate listing or alert is missing a required field or violates a constraint."""


class NotFoundError(AggregatorError):
    """An alert lookup by id + user missed."""


class ConfigurationError(AggregatorError):
    """A credential or setting required for the requested operation is absent."""
