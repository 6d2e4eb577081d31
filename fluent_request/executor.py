"""Executor - Sends a configured request and parses the response.

The pipeline is linear:

    NormalizeUrl -> ComposeQuery -> AssembleRequest -> Send -> Receive -> ParseResponse

and ends in either a typed result or a raised failure. Transport failures are
logged for diagnostics and re-raised unchanged; nothing is retried.
"""

from __future__ import annotations

import logging
import time
from email.utils import formatdate
from typing import Any, TypeVar

import httpx

from fluent_request.codec import JsonCodec, default_codec
from fluent_request.errors import ConfigurationError
from fluent_request.models import HttpMethod, RequestSpec, ResponseSpec
from fluent_request.url import compose_url, normalize_url

T = TypeVar("T")

logger = logging.getLogger(__name__)

LOG_PREFIX = "[FluentRequest]"


class HttpExecutor:
    """Executes RequestSpecs through a fresh httpx.Client per call.

    Usage:
        executor = HttpExecutor()
        person = executor.execute(spec, HttpMethod.GET, Person)

    Tests inject an ``httpx.MockTransport``:
        executor = HttpExecutor(transport=httpx.MockTransport(handler))
    """

    def __init__(
        self,
        codec: JsonCodec | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            codec: JSON codec for response parsing. Defaults to the shared codec.
            transport: Optional httpx transport. If None, httpx's default
                       transport (and default timeout) is used.
        """
        self._codec = codec or default_codec
        self._transport = transport

    def execute(
        self,
        spec: RequestSpec,
        method: HttpMethod | str,
        response_type: type[T],
    ) -> T:
        """Run the full pipeline and return the deserialized result.

        Args:
            spec: The configured request. Marked consumed before anything is sent.
            method: GET, POST, PUT or DELETE.
            response_type: Type to parse the response body into.

        Returns:
            Response body parsed into ``response_type``.

        Raises:
            ConfigurationError: If the spec was already executed, the method or
                response type is unsupported, or a parameter has no value.
            httpx.HTTPError: On connection failure or non-success status (unchanged).
            DeserializationError: If the response body does not fit ``response_type``.
        """
        return self.send(spec, method, response_type).result

    def send(
        self,
        spec: RequestSpec,
        method: HttpMethod | str,
        response_type: type[T],
    ) -> ResponseSpec:
        """Run the pipeline and return the full ResponseSpec (status, headers, text, result)."""
        if spec.consumed:
            raise ConfigurationError("Request has already been executed; build a new one")
        try:
            spec.method = HttpMethod(method)
        except ValueError:
            raise ConfigurationError(
                f"Unsupported HTTP method {method!r}; use GET, POST, PUT or DELETE"
            ) from None
        spec.consumed = True

        self._codec.adapter_for(response_type)
        url = self.build_url(spec)

        with httpx.Client(**self._client_kwargs(spec)) as client:
            request = self.assemble_request(client, spec, url)
            response, elapsed_ms = self._send(client, request)

        return self._parse_response(response, elapsed_ms, response_type)

    def build_url(self, spec: RequestSpec) -> str:
        """Normalize the URL and append the composed parameters."""
        url = normalize_url(spec.url)
        url = compose_url(url, spec.parameters, spec.url_format)
        logger.debug("%s URL: %s", LOG_PREFIX, url)
        return url

    def _client_kwargs(self, spec: RequestSpec) -> dict[str, Any]:
        """Build kwargs for httpx.Client: transport and proxy only when set."""
        kwargs: dict[str, Any] = {}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        if spec.proxy is not None:
            kwargs["proxy"] = spec.proxy.url
        return kwargs

    def assemble_request(
        self,
        client: httpx.Client,
        spec: RequestSpec,
        url: str,
    ) -> httpx.Request:
        """Build the outgoing request: method, negotiation headers, caller headers, body.

        Content-Length is the UTF-8 byte length of the body (0 when absent or
        blank); the body itself is only attached when it is non-blank.
        """
        if spec.method is None:
            raise ConfigurationError("Request method is not set")

        content: bytes | None = None
        if spec.body is not None and spec.has_body:
            content = spec.body.encode("utf-8")

        headers: list[tuple[str, str]] = [
            ("Content-Type", spec.content_type),
        ]
        if spec.accept:
            headers.append(("Accept", spec.accept))
        headers.append(("User-Agent", spec.effective_user_agent))
        headers.append(("Date", formatdate(usegmt=True)))

        if spec.headers:
            logger.debug("%s HEADERS:", LOG_PREFIX)
        for name, value in spec.headers:
            headers.append((name, value))
            logger.debug("%s %s: %s", LOG_PREFIX, name, value)

        headers.append(("Content-Length", str(len(content) if content else 0)))

        if content:
            logger.debug("%s BODY:\n%s", LOG_PREFIX, self._codec.pretty(spec.body))

        request = client.build_request(
            spec.method.value,
            url,
            headers=headers,
            content=content,
        )
        # httpx adds "Accept: */*" by default; Accept is only sent when configured
        caller_accept = any(name.lower() == "accept" for name, _ in spec.headers)
        if not spec.accept and not caller_accept:
            request.headers.pop("Accept", None)
        return request

    def _send(
        self,
        client: httpx.Client,
        request: httpx.Request,
    ) -> tuple[httpx.Response, float]:
        """Send the request and read the full response.

        Raises:
            httpx.HTTPError: Re-raised unchanged after diagnostics are logged.
        """
        start_time = time.perf_counter()
        try:
            response = client.send(request)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._log_transport_failure(e)
            raise
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        return response, elapsed_ms

    def _parse_response(
        self,
        response: httpx.Response,
        elapsed_ms: float,
        response_type: type[T],
    ) -> ResponseSpec:
        """Convert the httpx Response into a ResponseSpec with a typed result.

        Raises:
            DeserializationError: If the body is not valid JSON for ``response_type``.
        """
        text = response.text
        logger.debug("%s RESPONSE:\n%s", LOG_PREFIX, self._codec.pretty(text))

        result = self._codec.deserialize(text, response_type, status_code=response.status_code)

        # Headers - lowercase keys, list values
        headers: dict[str, list[str]] = {}
        for key, value in response.headers.multi_items():
            headers.setdefault(key.lower(), []).append(value)

        return ResponseSpec(
            status_code=response.status_code,
            headers=headers,
            text=text,
            elapsed_ms=elapsed_ms,
            result=result,
        )

    def _log_transport_failure(self, error: httpx.HTTPError) -> None:
        """Log message, status, inner cause and error body. Never raises."""
        status: int | None = None
        body: str | None = None
        if isinstance(error, httpx.HTTPStatusError):
            status = error.response.status_code
            try:
                body = error.response.text
            except (httpx.ResponseNotRead, UnicodeDecodeError):
                body = None

        logger.error(
            "%s TRANSPORT FAILURE\nMessage: %s\nType: %s\nStatus: %s\nInner: %r",
            LOG_PREFIX,
            error,
            type(error).__name__,
            status if status is not None else "<no response>",
            error.__cause__ or error.__context__,
        )
        if body is not None:
            logger.error("%s ERROR BODY:\n%s", LOG_PREFIX, self._codec.pretty(body))
