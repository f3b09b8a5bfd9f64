"""Command line tool performing requests through the courier client.

Usage:
    http-tool get https://swapi.dev/api/people/13/
    http-tool get --verbose https://swapi.dev/api/people/13/
"""

from __future__ import annotations

import asyncio
import sys

import click
import httpx
from loguru import logger

from .client import HTTPClient
from .config import Configuration
from .descriptions import describe_request, describe_response, to_json
from .errors import CourierError
from .request import HTTPRequest


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def make_client(host: str, scheme: str, port: int | None) -> HTTPClient:
    """Create the client used by the commands."""
    return HTTPClient(Configuration(host=host, port=port, is_insecure=scheme == "http"))


def _parse_url(ctx: click.Context, param: click.Parameter, value: str) -> httpx.URL:
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as e:
        raise click.BadParameter(f"Invalid URL '{value}'.") from e
    if not url.host:
        raise click.BadParameter(f"Invalid URL '{value}'.")
    return url


@click.group(help="HTTPClient command line tool.\n\nA utility to perform network requests via the courier library.")
def cli() -> None:
    pass


@cli.command(help="Performs an HTTP GET request to load the specified URL.", short_help="GETs a URL")
@click.option("-v", "--verbose", is_flag=True, help="Print the request and response.")
@click.argument("url", callback=_parse_url)
def get(verbose: bool, url: httpx.URL) -> None:
    configure_logging(verbose)
    try:
        body = asyncio.run(_get(url, verbose))
        click.echo(to_json(body, pretty_printed=True))
    except CourierError as e:
        raise click.ClickException(str(e)) from e
    except ValueError as e:
        raise click.ClickException(f"Response is not valid JSON: {e}") from e


async def _get(url: httpx.URL, verbose: bool) -> bytes:
    client = make_client(url.host, url.scheme, url.port)
    request = HTTPRequest.get(url.raw_path.decode("ascii"), response_type=bytes)

    if verbose:
        click.echo(repr(request))

    async with client:
        response = await client.data(request)

    if verbose:
        click.echo(describe_request(response.request))
        click.echo(describe_response(response.response))

    return response.value


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
