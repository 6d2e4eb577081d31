"""URL normalization and query-string composition.

Values are inserted verbatim: no escaping or percent-encoding is applied, so
callers must pass URL-safe parameter names and values.
"""

from __future__ import annotations

import re

from fluent_request.models import UrlFormat
from fluent_request.parameters import ParameterStore

_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


def normalize_url(url: str) -> str:
    """Prefix ``http://`` unless the URL already starts with http:// or https://."""
    if _SCHEME.match(url):
        return url
    return f"http://{url}"


def render_query_suffix(
    pairs: list[tuple[str, str]],
    url_format: UrlFormat,
    continue_query: bool = False,
) -> str:
    """Render (name, value) pairs as a URL suffix.

    QUESTIONS renders ``?a=1&b=2`` (``&a=1&b=2`` when continuing an existing
    query string). SLASHES renders ``/a/1/b/2``.
    """
    if not pairs:
        return ""
    if url_format is UrlFormat.SLASHES:
        return "".join(f"/{name}/{value}" for name, value in pairs)
    query = "&".join(f"{name}={value}" for name, value in pairs)
    return f"{'&' if continue_query else '?'}{query}"


def compose_url(url: str, parameters: ParameterStore, url_format: UrlFormat) -> str:
    """Append the rendered parameters to ``url``. No-op without parameters.

    Raises:
        ConfigurationError: If a parameter was registered without a value.
    """
    if not parameters:
        return url
    pairs = parameters.rendered()
    if url_format is UrlFormat.SLASHES:
        return url.rstrip("/") + render_query_suffix(pairs, url_format)
    suffix = render_query_suffix(pairs, url_format, continue_query="?" in url)
    if url.endswith(("?", "&")):
        return url + suffix[1:]
    return url + suffix
