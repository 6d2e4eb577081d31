"""Fluent request builder.

One RequestSpec is shared by a set of lightweight phase views. Each view holds
a back-reference to the same spec and only exposes the calls that make sense
in its phase:

    for_url(...)                      -> RequestBuilder
    RequestBuilder.add_parameter(n)   -> ParameterContext
    ParameterContext.with_value(v)    -> RequestBuilder
    RequestBuilder.with_options       -> OptionsContext
    OptionsContext.end_options()      -> RequestBuilder
    RequestBuilder.submit()           -> OperationContext
    OperationContext.get()/post()/... -> result

Example:
    person = (
        for_url("echo.example.com", UrlFormat.SLASHES, response_type=Person)
        .add_parameter("FirstName").with_value("Jhon")
        .add_parameter("LastName").with_value("Doe")
        .submit()
        .get()
    )

A builder is single-use: once a terminal operation has run, every further call
on any of its views raises ConfigurationError.
"""

from __future__ import annotations

from typing import Any, Generic, Iterable, Mapping, TypeVar

import httpx

from fluent_request.codec import JsonCodec, default_codec
from fluent_request.errors import ConfigurationError
from fluent_request.executor import HttpExecutor
from fluent_request.formatting import FormatRuleLike
from fluent_request.models import (
    Formatting,
    HttpMethod,
    ProxyConfig,
    RequestDefaults,
    RequestSpec,
    UrlFormat,
)

T = TypeVar("T")


def for_url(
    url: str,
    url_format: UrlFormat | str | None = None,
    *,
    response_type: Any = dict,
    defaults: RequestDefaults | None = None,
    codec: JsonCodec | None = None,
) -> "RequestBuilder[Any]":
    """Start building a request for ``url``.

    Args:
        url: Target URL. ``http://`` is prefixed at execution time if no scheme is given.
        url_format: Parameter layout. Defaults to ``defaults.url_format`` when a
                    defaults table is given, otherwise QUESTIONS.
        response_type: Type the response body is parsed into (dict, a pydantic
                       model, a dataclass, ``list[...]``, ...).
        defaults: Optional defaults table (content type, accept, user agent,
                  proxy, headers).
        codec: JSON codec for body serialization and response parsing.

    Raises:
        ConfigurationError: If url is None, empty or blank, or pydantic cannot
            parse into ``response_type``.
    """
    if not isinstance(url, str) or not url.strip():
        raise ConfigurationError("url must be a non-empty string")

    codec = codec or default_codec
    codec.adapter_for(response_type)

    if url_format is None:
        url_format = defaults.url_format if defaults is not None else UrlFormat.QUESTIONS
    try:
        url_format = UrlFormat(url_format)
    except ValueError:
        raise ConfigurationError(
            f"Invalid url_format {url_format!r}; use 'questions' or 'slashes'"
        ) from None

    if defaults is not None:
        spec = RequestSpec.from_defaults(url, url_format, defaults)
    else:
        spec = RequestSpec(url=url, url_format=url_format)
    return RequestBuilder(spec, response_type, codec)


class _View:
    """Shared back-reference to the builder's spec plus the single-use guard."""

    def __init__(self, spec: RequestSpec, response_type: Any, codec: JsonCodec) -> None:
        self._spec = spec
        self._response_type = response_type
        self._codec = codec

    @property
    def spec(self) -> RequestSpec:
        return self._spec

    def _check_open(self) -> RequestSpec:
        if self._spec.consumed:
            raise ConfigurationError("Request has already been executed; build a new one")
        return self._spec

    def _builder(self) -> "RequestBuilder[Any]":
        return RequestBuilder(self._spec, self._response_type, self._codec)


class RequestBuilder(_View, Generic[T]):
    """Main configuration chain."""

    def add_parameter(self, name: str) -> "ParameterContext[T]":
        """Register a parameter; bind its value with ``with_value``.

        Raises:
            ConfigurationError: If name is empty/blank or already registered.
        """
        spec = self._check_open()
        spec.parameters.add(name)
        return ParameterContext(spec, self._response_type, self._codec, name)

    def with_body(
        self,
        body: Any,
        formatting: Formatting | str = Formatting.COMPACT,
    ) -> "RequestBuilder[T]":
        """Set the request body.

        A ``str`` is used verbatim as JSON text and replaces any previous body.
        ``None`` is a no-op. Any other object is serialized with the codec.

        Raises:
            SerializationError: If the object cannot be serialized.
        """
        spec = self._check_open()
        if body is None:
            return self
        if isinstance(body, str):
            spec.body = body
        else:
            spec.body = self._codec.serialize(body, Formatting(formatting))
        return self

    @property
    def with_options(self) -> "OptionsContext[T]":
        """Enter the options chain (content type, accept, user agent, proxy, headers)."""
        spec = self._check_open()
        return OptionsContext(spec, self._response_type, self._codec)

    def submit(self, executor: HttpExecutor | None = None) -> "OperationContext[T]":
        """Finish configuration. No side effect beyond continuing the chain."""
        spec = self._check_open()
        return OperationContext(spec, self._response_type, self._codec, executor)


class ParameterContext(_View, Generic[T]):
    """Pending parameter awaiting its value."""

    def __init__(
        self,
        spec: RequestSpec,
        response_type: Any,
        codec: JsonCodec,
        name: str,
    ) -> None:
        super().__init__(spec, response_type, codec)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def with_value(
        self,
        value: Any,
        format_rule: FormatRuleLike | None = None,
    ) -> RequestBuilder[T]:
        """Bind the pending parameter's value and format rule (INVARIANT if None)."""
        spec = self._check_open()
        spec.parameters.bind(self._name, value, format_rule)
        return self._builder()


class OptionsContext(_View, Generic[T]):
    """Options chain. Every call returns this context; ``end_options`` leaves it."""

    def content_type(self, content_type: str | None) -> "OptionsContext[T]":
        """Set Content-Type. Empty or blank values are ignored."""
        spec = self._check_open()
        if content_type and content_type.strip():
            spec.content_type = content_type
        return self

    def accept(self, accept: str | None) -> "OptionsContext[T]":
        """Set Accept. Empty or blank values are ignored."""
        spec = self._check_open()
        if accept and accept.strip():
            spec.accept = accept
        return self

    def user_agent(self, user_agent: str | None) -> "OptionsContext[T]":
        """Set User-Agent. None falls back to the default at execution time."""
        spec = self._check_open()
        spec.user_agent = user_agent
        return self

    def proxy(
        self,
        proxy: ProxyConfig | httpx.Proxy | str,
        port: int | None = None,
    ) -> "OptionsContext[T]":
        """Route the request through a proxy.

        Three forms:
            proxy(ProxyConfig(...)) or proxy(httpx.Proxy(...))
            proxy("http://proxy.internal:3128")
            proxy("proxy.internal", 3128)

        Raises:
            ConfigurationError: If the address, host or port is invalid.
        """
        spec = self._check_open()
        try:
            if isinstance(proxy, ProxyConfig):
                spec.proxy = proxy
            elif isinstance(proxy, httpx.Proxy):
                spec.proxy = ProxyConfig(url=str(proxy.url))
            elif port is not None:
                spec.proxy = ProxyConfig.from_host_port(proxy, port)
            else:
                spec.proxy = ProxyConfig.from_address(proxy)
        except ValueError as e:
            raise ConfigurationError(f"Invalid proxy: {e}") from e
        return self

    def headers(
        self,
        headers: Mapping[str, str] | Iterable[tuple[str, str]] | None,
    ) -> "OptionsContext[T]":
        """Append caller headers in the order supplied. Duplicates are kept."""
        spec = self._check_open()
        if headers is None:
            return self
        items = headers.items() if isinstance(headers, Mapping) else headers
        for name, value in items:
            spec.headers.append((str(name), str(value)))
        return self

    def header(self, name: str, value: str) -> "OptionsContext[T]":
        """Append a single header."""
        return self.headers([(name, value)])

    def end_options(self) -> RequestBuilder[T]:
        """Return to the main chain."""
        self._check_open()
        return self._builder()


class OperationContext(_View, Generic[T]):
    """Terminal operations. Each one consumes the request."""

    def __init__(
        self,
        spec: RequestSpec,
        response_type: Any,
        codec: JsonCodec,
        executor: HttpExecutor | None = None,
    ) -> None:
        super().__init__(spec, response_type, codec)
        self._executor = executor or HttpExecutor(codec=codec)

    def get(self) -> T:
        return self._execute(HttpMethod.GET)

    def post(self) -> T:
        return self._execute(HttpMethod.POST)

    def put(self) -> T:
        return self._execute(HttpMethod.PUT)

    def delete(self) -> T:
        return self._execute(HttpMethod.DELETE)

    def _execute(self, method: HttpMethod) -> T:
        spec = self._check_open()
        return self._executor.execute(spec, method, self._response_type)
