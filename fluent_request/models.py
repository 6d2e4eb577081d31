"""Data models for fluent-request.

Configuration and response models use Pydantic v2. RequestSpec is a plain
mutable dataclass: it is owned by a single builder and changed in place by the
fluent calls until a terminal operation consumes it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fluent_request.parameters import ParameterStore


# =============================================================================
# Defaults
# =============================================================================


DEFAULT_CONTENT_TYPE = "application/json; charset=utf-8"
DEFAULT_USER_AGENT = "fluent-request"


# =============================================================================
# Enumerations
# =============================================================================


class UrlFormat(str, Enum):
    """How parameters are appended to the URL.

    QUESTIONS: ``?a=1&b=2``
    SLASHES:   ``/a/1/b/2``
    """

    QUESTIONS = "questions"
    SLASHES = "slashes"


class HttpMethod(str, Enum):
    """Supported HTTP verbs. Nothing beyond these four is sent."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class Formatting(str, Enum):
    """JSON output layout for serialized bodies."""

    COMPACT = "compact"
    INDENTED = "indented"


# =============================================================================
# Configuration Models
# =============================================================================


_SCHEME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")


class ProxyConfig(BaseModel):
    """Proxy to route the request through.

    The address gets an ``http://`` scheme when none is given, so
    ``proxy.internal:3128`` and ``http://proxy.internal:3128`` are equivalent.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str = Field(description="Proxy URL, e.g. http://proxy.internal:3128")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("proxy address must not be empty")
        v = v.strip()
        if not _SCHEME_PATTERN.match(v):
            v = f"http://{v}"
        return v

    @classmethod
    def from_address(cls, address: str) -> "ProxyConfig":
        return cls(url=address)

    @classmethod
    def from_host_port(cls, host: str, port: int) -> "ProxyConfig":
        if not host or not host.strip():
            raise ValueError("proxy host must not be empty")
        if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
            raise ValueError(f"proxy port must be between 1 and 65535, got {port!r}")
        return cls(url=f"{host.strip()}:{port}")


class RequestDefaults(BaseModel):
    """Defaults applied to every builder created with this table.

    Loaded from YAML by config_loader.load_request_defaults().
    """

    model_config = ConfigDict(extra="forbid")

    content_type: str = Field(default=DEFAULT_CONTENT_TYPE, description="Content-Type header")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent header")
    accept: str | None = Field(default=None, description="Accept header (omitted if unset)")
    proxy: ProxyConfig | None = Field(default=None, description="Proxy (transport default if unset)")
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers added to every request (supports ${ENV_VAR} substitution)",
    )
    url_format: UrlFormat = Field(default=UrlFormat.QUESTIONS, description="Parameter layout")


# =============================================================================
# Request / Response
# =============================================================================


@dataclass
class RequestSpec:
    """Everything needed to send one request.

    Owned by one builder, mutated only through its fluent views, and consumed
    exactly once by a terminal operation (``consumed`` guards reuse).
    """

    url: str
    url_format: UrlFormat = UrlFormat.QUESTIONS
    method: HttpMethod | None = None
    content_type: str = DEFAULT_CONTENT_TYPE
    accept: str | None = None
    user_agent: str | None = None
    proxy: ProxyConfig | None = None
    headers: list[tuple[str, str]] = field(default_factory=list)
    parameters: ParameterStore = field(default_factory=ParameterStore)
    body: str | None = None
    consumed: bool = False

    @classmethod
    def from_defaults(
        cls,
        url: str,
        url_format: UrlFormat,
        defaults: RequestDefaults,
    ) -> "RequestSpec":
        return cls(
            url=url,
            url_format=url_format,
            content_type=defaults.content_type,
            accept=defaults.accept,
            user_agent=defaults.user_agent,
            proxy=defaults.proxy,
            headers=list(defaults.headers.items()),
        )

    @property
    def effective_user_agent(self) -> str:
        return self.user_agent if self.user_agent is not None else DEFAULT_USER_AGENT

    @property
    def has_body(self) -> bool:
        return self.body is not None and bool(self.body.strip())


class ResponseSpec(BaseModel):
    """One received response and its deserialized result.

    Header keys are lowercase. Header values are arrays for repeated headers.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    status_code: int = Field(description="HTTP status code")
    headers: dict[str, list[str]] = Field(
        default_factory=dict, description="Response headers (lowercase keys, array values)"
    )
    text: str = Field(default="", description="Raw response body text")
    elapsed_ms: float = Field(description="Response time in milliseconds")
    result: Any = Field(default=None, description="Response parsed into the target type")
