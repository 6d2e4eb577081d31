"""CLI entry point for fluent-request.

Sends one request built from command-line arguments and prints the JSON
response to stdout.

    fluent-request get echo.jsontest.com --slashes --param name=abc
    fluent-request post http://api.local/items --body '{"name": "x"}' --indent
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from fluent_request.builder import for_url
from fluent_request.config_loader import load_request_defaults
from fluent_request.errors import FluentRequestError
from fluent_request.executor import HttpExecutor
from fluent_request.models import HttpMethod, RequestDefaults, UrlFormat


def parse_param(value: str) -> tuple[str, str]:
    """Parse NAME=VALUE format.

    Raises:
        argparse.ArgumentTypeError: If format is invalid.
    """
    if "=" not in value:
        raise argparse.ArgumentTypeError(
            f"Invalid parameter '{value}'. Expected NAME=VALUE (e.g., 'page=2')"
        )
    name, param_value = value.split("=", 1)
    if not name.strip():
        raise argparse.ArgumentTypeError(
            f"Invalid parameter '{value}'. Name cannot be empty."
        )
    return (name, param_value)


def parse_header(value: str) -> tuple[str, str]:
    """Parse NAME:VALUE format. Surrounding whitespace of the value is stripped.

    Raises:
        argparse.ArgumentTypeError: If format is invalid.
    """
    if ":" not in value:
        raise argparse.ArgumentTypeError(
            f"Invalid header '{value}'. Expected NAME:VALUE (e.g., 'X-Api-Key: abc')"
        )
    name, header_value = value.split(":", 1)
    if not name.strip():
        raise argparse.ArgumentTypeError(
            f"Invalid header '{value}'. Name cannot be empty."
        )
    return (name.strip(), header_value.strip())


@dataclass
class RequestArgs:
    """Parsed arguments for a single request."""

    method: HttpMethod
    url: str
    url_format: UrlFormat | None = None
    params: list[tuple[str, str]] = field(default_factory=list)
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: str | None = None
    content_type: str | None = None
    accept: str | None = None
    user_agent: str | None = None
    proxy: str | None = None
    config: Path | None = None
    indent: bool = False
    verbose: bool = False


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fluent-request",
        description="Send one HTTP request and print the JSON response.",
    )
    parser.add_argument(
        "method",
        type=str.upper,
        choices=[m.value for m in HttpMethod],
        help="HTTP method",
    )
    parser.add_argument("url", help="Target URL (http:// is added if no scheme is given)")
    parser.add_argument(
        "--slashes",
        action="store_true",
        help="Append parameters as /name/value segments instead of ?name=value",
    )
    parser.add_argument(
        "--param",
        type=parse_param,
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Request parameter (repeatable, order preserved)",
    )
    parser.add_argument(
        "--header",
        type=parse_header,
        action="append",
        default=[],
        metavar="NAME:VALUE",
        help="Request header (repeatable)",
    )
    parser.add_argument("--body", default=None, help="Raw JSON request body")
    parser.add_argument("--content-type", default=None, help="Content-Type header")
    parser.add_argument("--accept", default=None, help="Accept header")
    parser.add_argument("--user-agent", default=None, help="User-Agent header")
    parser.add_argument("--proxy", default=None, metavar="ADDRESS", help="Proxy address")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with request defaults",
    )
    parser.add_argument("--indent", action="store_true", help="Pretty-print the response")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log request/response diagnostics to stderr",
    )
    return parser


def parse_args(args: list[str] | None = None) -> RequestArgs:
    """Parse command-line arguments and return a RequestArgs.

    Raises:
        SystemExit: If arguments are invalid (argparse behavior).
    """
    namespace = build_parser().parse_args(args)
    return RequestArgs(
        method=HttpMethod(namespace.method),
        url=namespace.url,
        url_format=UrlFormat.SLASHES if namespace.slashes else None,
        params=namespace.param,
        headers=namespace.header,
        body=namespace.body,
        content_type=namespace.content_type,
        accept=namespace.accept,
        user_agent=namespace.user_agent,
        proxy=namespace.proxy,
        config=namespace.config,
        indent=namespace.indent,
        verbose=namespace.verbose,
    )


def run_request(
    args: RequestArgs,
    transport: httpx.BaseTransport | None = None,
) -> Any:
    """Build and send the request described by ``args``; return the parsed JSON."""
    defaults: RequestDefaults | None = None
    if args.config is not None:
        defaults = load_request_defaults(args.config)

    builder = for_url(args.url, args.url_format, response_type=Any, defaults=defaults)
    for name, value in args.params:
        builder = builder.add_parameter(name).with_value(value)

    options = builder.with_options.content_type(args.content_type).accept(args.accept)
    if args.user_agent is not None:
        options = options.user_agent(args.user_agent)
    if args.proxy is not None:
        options = options.proxy(args.proxy)
    builder = options.headers(args.headers).end_options()

    if args.body is not None:
        builder = builder.with_body(args.body)

    operation = builder.submit(executor=HttpExecutor(transport=transport))
    if args.method is HttpMethod.GET:
        return operation.get()
    elif args.method is HttpMethod.POST:
        return operation.post()
    elif args.method is HttpMethod.PUT:
        return operation.put()
    else:
        return operation.delete()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    try:
        result = run_request(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 1
    except (FluentRequestError, httpx.HTTPError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2 if args.indent else None, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
