"""Tests for URL normalization and query-string composition.

Tests cover:
- Scheme prefixing (property-based and explicit cases)
- QUESTIONS and SLASHES layouts, including existing queries and trailing slashes
- No-op composition without parameters
- Verbatim (unescaped) value rendering
"""

import re

import pytest
from hypothesis import given
from hypothesis import strategies as st

from fluent_request.errors import ConfigurationError
from fluent_request.executor import HttpExecutor
from fluent_request.formatting import PatternFormat
from fluent_request.models import RequestSpec, UrlFormat
from fluent_request.parameters import ParameterStore
from fluent_request.url import compose_url, normalize_url, render_query_suffix

_HAS_SCHEME = re.compile(r"^https?://", re.IGNORECASE)

scheme_less_urls = st.text(min_size=1).filter(lambda s: s.strip() and not _HAS_SCHEME.match(s))


def _store(*pairs):
    store = ParameterStore()
    for name, value in pairs:
        store.add(name)
        store.bind(name, value)
    return store


# =============================================================================
# normalize_url
# =============================================================================


class TestNormalizeUrl:
    @given(scheme_less_urls)
    def test_scheme_less_url_gets_http_prefix(self, url):
        assert normalize_url(url) == "http://" + url

    @given(scheme_less_urls)
    def test_effective_request_url_without_parameters(self, url):
        """The executor's final URL is exactly http:// + url when no parameters exist."""
        spec = RequestSpec(url=url)
        assert HttpExecutor().build_url(spec) == "http://" + url

    @pytest.mark.parametrize(
        "url",
        [
            "http://example.com",
            "https://example.com/path",
            "HTTP://EXAMPLE.COM",
            "HtTpS://example.com",
        ],
    )
    def test_existing_scheme_unchanged(self, url):
        assert normalize_url(url) == url

    def test_other_scheme_still_prefixed(self):
        """Only http/https count as a scheme."""
        assert normalize_url("ftp://example.com") == "http://ftp://example.com"

    def test_no_other_transformation(self):
        assert normalize_url("example.com/a b?x=1") == "http://example.com/a b?x=1"


# =============================================================================
# Query composition
# =============================================================================


class TestComposeQuestions:
    def test_two_parameters(self):
        url = compose_url("http://h", _store(("a", 1), ("b", 2)), UrlFormat.QUESTIONS)
        assert url == "http://h?a=1&b=2"

    def test_single_parameter(self):
        url = compose_url("http://h/items", _store(("page", 3)), UrlFormat.QUESTIONS)
        assert url == "http://h/items?page=3"

    def test_existing_query_continues_with_ampersand(self):
        url = compose_url("http://h/items?x=0", _store(("a", 1)), UrlFormat.QUESTIONS)
        assert url == "http://h/items?x=0&a=1"

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("http://h/items?", "http://h/items?a=1"),
            ("http://h/items?x=0&", "http://h/items?x=0&a=1"),
        ],
    )
    def test_open_query_gets_no_extra_separator(self, url, expected):
        assert compose_url(url, _store(("a", 1)), UrlFormat.QUESTIONS) == expected

    def test_order_preserved(self):
        names = ["zeta", "alpha", "mid", "beta"]
        store = _store(*[(n, i) for i, n in enumerate(names)])
        url = compose_url("http://h", store, UrlFormat.QUESTIONS)
        assert url == "http://h?zeta=0&alpha=1&mid=2&beta=3"


class TestComposeSlashes:
    def test_two_parameters(self):
        url = compose_url("http://h", _store(("a", 1), ("b", 2)), UrlFormat.SLASHES)
        assert url == "http://h/a/1/b/2"

    def test_trailing_slash_not_doubled(self):
        url = compose_url("http://h/", _store(("a", 1)), UrlFormat.SLASHES)
        assert url == "http://h/a/1"

    def test_appends_to_existing_path(self):
        url = compose_url("http://h/api", _store(("id", 7)), UrlFormat.SLASHES)
        assert url == "http://h/api/id/7"


class TestRenderQuerySuffix:
    def test_questions_suffix(self):
        assert render_query_suffix([("a", "1"), ("b", "2")], UrlFormat.QUESTIONS) == "?a=1&b=2"

    def test_slashes_suffix(self):
        assert render_query_suffix([("a", "1"), ("b", "2")], UrlFormat.SLASHES) == "/a/1/b/2"

    def test_empty_pairs(self):
        assert render_query_suffix([], UrlFormat.QUESTIONS) == ""
        assert render_query_suffix([], UrlFormat.SLASHES) == ""


class TestComposeEdgeCases:
    @pytest.mark.parametrize("url_format", list(UrlFormat))
    def test_no_parameters_is_noop(self, url_format):
        assert compose_url("http://h/", ParameterStore(), url_format) == "http://h/"

    def test_values_not_escaped(self):
        """Values are inserted verbatim (documented limitation)."""
        url = compose_url("http://h", _store(("q", "a b&c")), UrlFormat.QUESTIONS)
        assert url == "http://h?q=a b&c"

    def test_format_rule_applied(self):
        store = ParameterStore()
        store.add("price")
        store.bind("price", 3.14159, PatternFormat(".2f"))
        assert compose_url("http://h", store, UrlFormat.QUESTIONS) == "http://h?price=3.14"

    def test_unbound_parameter_raises(self):
        store = ParameterStore()
        store.add("a")
        with pytest.raises(ConfigurationError, match="'a'"):
            compose_url("http://h", store, UrlFormat.QUESTIONS)
