"""eventsource CLI entry point: Click group with subcommands."""
from __future__ import annotations

import logging
import sys

import click

from eventsource import __version__
from eventsource._auth import basic_auth
from eventsource.client import EventSource
from eventsource.config import EventSourceConfig
from eventsource.errors import ConfigurationError
from eventsource.transport import HttpxTransport


@click.group()
@click.version_option(version=__version__, prog_name="eventsource")
def cli() -> None:
    """eventsource - listen to Server-Sent Events streams."""


def _parse_headers(values: tuple[str, ...]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected NAME:VALUE, got {raw!r}", param_hint="--header")
        headers[name.strip()] = value.strip()
    return headers


@cli.command()
@click.argument("url")
@click.option("--header", "-H", "header_values", multiple=True, help="Extra request header as NAME:VALUE")
@click.option("--user", default=None, help="Username for HTTP Basic authentication")
@click.option("--password", default="", help="Password for HTTP Basic authentication")
@click.option("--last-event-id", default=None, help="Resume the stream after this event id")
@click.option("--event", "event_types", multiple=True, help="Named event type to print (repeatable)")
@click.option("--connect-timeout", default=10.0, type=float, show_default=True, help="Connect timeout in seconds")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def listen(
    url: str,
    header_values: tuple[str, ...],
    user: str | None,
    password: str,
    last_event_id: str | None,
    event_types: tuple[str, ...],
    connect_timeout: float,
    verbose: bool,
) -> None:
    """Connect to URL and print every event until the stream ends.

    Events without an explicit type are always printed; named events are
    printed for each --event given. Exits with code 1 if the stream ends
    with an error.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    headers = _parse_headers(header_values)
    if user is not None:
        headers["Authorization"] = basic_auth(user, password)

    try:
        config = EventSourceConfig(connect_timeout=connect_timeout)
    except ConfigurationError as exc:
        raise click.BadParameter(str(exc), param_hint="--connect-timeout") from exc

    failed = False

    def on_error() -> None:
        nonlocal failed
        failed = True
        click.echo("Stream failed", err=True)

    def print_event(event_id: str | None, event_type: str, data: str) -> None:
        click.echo(f"[{event_type}] id={event_id or '-'} {data}")

    transport = HttpxTransport(config)
    source = EventSource(
        url,
        headers,
        last_event_id=last_event_id,
        config=config,
        transport=transport,
        autostart=False,
    )
    source.on_open(lambda: click.echo(f"Connected to {url}", err=True))
    source.on_error(on_error)
    source.on_message(print_event)
    for event_type in event_types:
        source.add_event_listener(event_type, print_event)

    source.start()
    try:
        while not transport.join(0.5):
            pass
    except KeyboardInterrupt:
        click.echo("Interrupted", err=True)
    finally:
        source.shutdown()

    if failed:
        sys.exit(1)
