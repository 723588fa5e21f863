"""obs-websocket CLI.

Usage:
    obs-websocket version                              # Server and plugin versions
    obs-websocket call GetCurrentScene                 # Any request, JSON result
    obs-websocket call SetCurrentScene -f scene-name=Live
    obs-websocket listen                               # Print every update
    obs-websocket listen --kind scene.switched -n 5    # Stop after 5 events

Connection settings fall back to OBS_WEBSOCKET_URL, OBS_WEBSOCKET_PASSWORD
and OBS_WEBSOCKET_TIMEOUT.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import click
from pydantic import BaseModel

from .client import ObsWebSocketClient
from .config import ClientConfig
from .errors import ObsWebSocketError
from .protocol.updates import EventKind

LOG_LEVELS = ["debug", "info", "warning", "error"]

# Lifecycle kinds are client-side; listen reports them on stderr instead
UPDATE_KINDS = [
    k.value for k in EventKind if k not in (EventKind.CONNECTED, EventKind.DISCONNECTED)
]


def create_client(config: ClientConfig) -> ObsWebSocketClient:
    """Build the client used by every command."""
    return ObsWebSocketClient(config)


def parse_field(item: str) -> tuple[str, Any]:
    """Parse a key=value option; values are JSON when they parse as JSON."""
    key, sep, raw = item.partition("=")
    if not sep or not key:
        raise click.BadParameter(f"Expected key=value, got {item!r}", param_hint="--field")
    try:
        return key, json.loads(raw)
    except json.JSONDecodeError:
        return key, raw


def _run(
    config: ClientConfig,
    action: Callable[[ObsWebSocketClient], Awaitable[None]],
    setup: Callable[[ObsWebSocketClient], None] | None = None,
) -> None:
    """Connect, run an action, disconnect; client errors exit with status 1.

    setup runs before connecting, so subscriptions see every update.
    """

    async def execute() -> None:
        client = create_client(config)
        if setup is not None:
            setup(client)
        async with client:
            await action(client)

    try:
        asyncio.run(execute())
    except ObsWebSocketError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nStopped", err=True)


@click.group()
@click.option("--url", default=None, help="Server URL (default: ws://localhost:4444)")
@click.option("--password", default=None, help="Server password")
@click.option("--timeout", type=float, default=None, help="Per-request timeout in seconds")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS),
    default="warning",
    help="Log level (logs go to stderr)",
)
@click.pass_context
def main(
    ctx: click.Context,
    url: str | None,
    password: str | None,
    timeout: float | None,
    log_level: str,
) -> None:
    """obs-websocket - Control OBS Studio from the command line."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        ctx.obj = ClientConfig.from_env(url=url, password=password, timeout=timeout)
    except ValueError as e:
        raise click.UsageError(str(e)) from e


@main.command("version")
@click.pass_obj
def version(config: ClientConfig) -> None:
    """Show the OBS Studio and obs-websocket versions."""

    async def action(client: ObsWebSocketClient) -> None:
        info = await client.general.get_version()
        click.echo(f"OBS Studio:    {info.obs_version}")
        click.echo(f"obs-websocket: {info.plugin_version}")
        click.echo(f"Requests:      {len(info.request_types())}")

    _run(config, action)


@main.command("call")
@click.argument("request_type")
@click.option(
    "--field",
    "-f",
    "fields",
    multiple=True,
    help="Request field as key=value (repeatable; JSON values accepted)",
)
@click.pass_obj
def call(config: ClientConfig, request_type: str, fields: tuple[str, ...]) -> None:
    """Send a request and print its result as JSON."""
    request_fields = dict(parse_field(item) for item in fields)

    async def action(client: ObsWebSocketClient) -> None:
        result = await client.call(request_type, request_fields)
        click.echo(json.dumps(result, indent=2, ensure_ascii=False, default=str))

    _run(config, action)


@main.command("listen")
@click.option(
    "--kind",
    "-k",
    "kinds",
    multiple=True,
    type=click.Choice(UPDATE_KINDS),
    help="Event kind to print (repeatable; default: all)",
)
@click.option("--count", "-n", type=int, default=0, help="Stop after this many events")
@click.pass_obj
def listen(config: ClientConfig, kinds: tuple[str, ...], count: int) -> None:
    """Print server updates as JSON lines until interrupted."""
    selected = [EventKind(k) for k in (kinds or UPDATE_KINDS)]
    done = asyncio.Event()
    received = 0

    def printer(kind: EventKind) -> Callable[[BaseModel], None]:
        def on_event(payload: BaseModel) -> None:
            nonlocal received
            body = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
            click.echo(json.dumps({"event": kind.value, **body}, ensure_ascii=False))
            received += 1
            if count and received >= count:
                done.set()

        return on_event

    def setup(client: ObsWebSocketClient) -> None:
        for kind in selected:
            client.on(kind, printer(kind))

    async def action(client: ObsWebSocketClient) -> None:
        click.echo(f"Listening on {client.url}", err=True)
        stop = asyncio.create_task(done.wait())
        closed = asyncio.create_task(client.wait_closed())
        _, waiting = await asyncio.wait({stop, closed}, return_when=asyncio.FIRST_COMPLETED)
        for task in waiting:
            task.cancel()

        if closed.done() and not stop.done():
            click.echo("Connection closed by server", err=True)

    _run(config, action, setup)


if __name__ == "__main__":
    main()
