"""fluent-request: a fluent builder for one synchronous HTTP request/response cycle."""

from fluent_request.builder import (
    OperationContext,
    OptionsContext,
    ParameterContext,
    RequestBuilder,
    for_url,
)
from fluent_request.codec import JsonCodec
from fluent_request.errors import (
    ConfigurationError,
    DeserializationError,
    FluentRequestError,
    SerializationError,
    TransportError,
)
from fluent_request.executor import HttpExecutor
from fluent_request.formatting import INVARIANT, CultureFormat, FormatRule, InvariantFormat, PatternFormat
from fluent_request.models import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_USER_AGENT,
    Formatting,
    HttpMethod,
    ProxyConfig,
    RequestDefaults,
    RequestSpec,
    ResponseSpec,
    UrlFormat,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "CultureFormat",
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_USER_AGENT",
    "DeserializationError",
    "FluentRequestError",
    "FormatRule",
    "Formatting",
    "HttpExecutor",
    "HttpMethod",
    "INVARIANT",
    "InvariantFormat",
    "JsonCodec",
    "OperationContext",
    "OptionsContext",
    "ParameterContext",
    "PatternFormat",
    "ProxyConfig",
    "RequestBuilder",
    "RequestDefaults",
    "RequestSpec",
    "ResponseSpec",
    "SerializationError",
    "TransportError",
    "UrlFormat",
    "for_url",
]
