"""Command-line interface for mediahttp."""

import argparse
import io
import sys
from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from . import __version__
from .exceptions import MediaHttpError
from .http import Client, Method, Response
from .logging_config import setup_logging
from .mediatype import CodecRegistry, parse
from .models.config import ClientConfig


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="mediahttp",
        description="Send an HTTP request and print the decoded response",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # GET and pretty-print a JSON resource
  mediahttp https://api.example.com/users/1

  # POST a JSON body
  mediahttp https://api.example.com/users -d '{"login": "sawyer"}'

  # Send YAML, add query parameters and headers
  mediahttp https://api.example.com/items -X PUT -t application/x-yaml -d 'name: x' \\
      -p page=2 -H 'X-Trace: 1'

  # Resolve a path against a configured API
  mediahttp users/1 --config api.yaml
        """,
    )

    parser.add_argument(
        "url",
        help="URL to request (relative to base_url when --config is given)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    request_group = parser.add_argument_group("request")
    request_group.add_argument(
        "--method",
        "-X",
        type=str.upper,
        choices=[method.value for method in Method],
        default=None,
        help="HTTP method (default: GET, or POST when --data is given)",
    )
    request_group.add_argument(
        "--data",
        "-d",
        type=str,
        default=None,
        help="Request body, written in the format of --content-type",
    )
    request_group.add_argument(
        "--content-type",
        "-t",
        type=str,
        default="application/json",
        metavar="TYPE",
        help="Media type of --data (default: application/json)",
    )
    request_group.add_argument(
        "--param",
        "-p",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set a query parameter (repeatable)",
    )
    request_group.add_argument(
        "--header",
        "-H",
        action="append",
        default=[],
        metavar="'NAME: VALUE'",
        help="Add a request header (repeatable)",
    )
    request_group.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        metavar="FILE",
        help="YAML client configuration",
    )

    output_group = parser.add_argument_group("output control")
    output_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    output_group.add_argument(
        "--quiet",
        action="store_true",
        help="Only print the body",
    )

    return parser


def _split_pair(raw: str, separator: str) -> tuple[str, str]:
    key, sep, value = raw.partition(separator)
    if not sep or not key.strip():
        raise ValueError(f"Expected KEY{separator}VALUE, got {raw!r}")
    return key.strip(), value.strip()


def _load_config(args: argparse.Namespace) -> tuple[ClientConfig, str]:
    """Client config plus the request URL relative to its base."""
    if args.config:
        return ClientConfig.from_yaml_file(args.config), args.url
    return ClientConfig(base_url=args.url), args.url


def _print_body(console: Console, response: Response[Any], registry: CodecRegistry, quiet: bool) -> None:
    if not quiet:
        style = "red" if response.is_api_error() else "green"
        console.print(f"[bold {style}]{response.status_code} {response.reason}[/bold {style}]")
        if response.media_type is not None:
            console.print(f"[dim]{response.media_type}[/dim]")

    if response.body_closed:
        return

    media_type = response.media_type
    if media_type is not None and media_type.format in registry:
        payload = response.decode(object)
        if isinstance(payload, (dict, list)):
            console.print_json(data=payload)
        elif payload is not None:
            console.print(payload)
        return

    with response:
        text = response.body.read().decode("utf-8", errors="replace")
    if text:
        console.print(text, markup=False, highlight=False)


def run_request(args: argparse.Namespace) -> int:
    """Send the request described by ``args``."""
    console = Console()

    try:
        config, url = _load_config(args)
    except Exception as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return 1

    log_level = "DEBUG" if args.verbose else ("ERROR" if args.quiet else config.log_level)
    setup_logging(level=log_level, log_file=str(config.log_file) if config.log_file else None)

    try:
        with Client.from_config(config) as client:
            request = client.new_request(url)

            for header in args.header:
                name, value = _split_pair(header, ":")
                request.headers[name] = value
            for param in args.param:
                key, value = _split_pair(param, "=")
                request.query.set(key, value)

            if args.data is not None:
                media_type = parse(args.content_type)
                value = media_type.decode(object, io.BytesIO(args.data.encode("utf-8")), client.registry)
                request.set_body(media_type, value)

            method = args.method or ("POST" if args.data is not None else "GET")
            response = request.do(method)
            if response.exception is not None:
                console.print(f"[red]Error:[/red] {response.error()}")
                return 1
            _print_body(console, response, client.registry, args.quiet)
            return 1 if response.is_error() else 0

    except (MediaHttpError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    return run_request(args)


if __name__ == "__main__":
    sys.exit(main())
