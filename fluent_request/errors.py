"""Error taxonomy for fluent-request.

Every failure surfaces to the caller as a distinguishable kind:

    ConfigurationError    bad builder input, raised at configuration time
                          (or at execution time for unbound parameters)
    SerializationError    an object body cannot be converted to JSON
    TransportError        connection failure or non-success HTTP status
    DeserializationError  response text does not fit the target type

TransportError is an alias of httpx.HTTPError. Transport failures are logged
and then re-raised unchanged, so callers see the original httpx exception
(httpx.HTTPStatusError, httpx.ConnectError, ...).
"""

from __future__ import annotations

import httpx


class FluentRequestError(Exception):
    """Base class for fluent-request errors."""


class ConfigurationError(FluentRequestError, ValueError):
    """Raised when a request is configured with invalid input."""


class SerializationError(FluentRequestError):
    """Raised when an object body cannot be serialized to JSON."""


class DeserializationError(FluentRequestError):
    """Raised when a response body cannot be parsed into the target type.

    Attributes:
        target_type: The type the response was being parsed into.
        text: The raw response text.
        status_code: HTTP status of the response, if known.
    """

    def __init__(
        self,
        message: str,
        target_type: object = None,
        text: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.target_type = target_type
        self.text = text
        self.status_code = status_code


TransportError = httpx.HTTPError
