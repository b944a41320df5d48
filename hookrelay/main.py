"""hookrelay entry point: serve webhooks, inspect routing, preview messages."""

from __future__ import annotations

import asyncio
import json
import signal
import sys
from pathlib import Path

import click

from hookrelay import __version__
from hookrelay.config import RepoRoute, Settings, load_settings
from hookrelay.core.classifier import classify
from hookrelay.errors import RelayError
from hookrelay.models import ChannelNotification, ForumThreadNotification
from hookrelay.secrets.provider import ConfigProvider
from hookrelay.secrets.store import create_secret_store
from hookrelay.utils.logging import get_logger, setup_logging
from hookrelay.webhooks.handler import create_request_handler
from hookrelay.webhooks.payload import decode_body, parse_payload
from hookrelay.webhooks.server import WebhookServer

log = get_logger(__name__)


def _redact_secret(value: str, visible_chars: int = 4) -> str:
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


async def run(settings: Settings) -> None:
    server = WebhookServer(settings.server, create_request_handler(settings))

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        log.info("shutdown_signal")
        stop_event.set()

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _signal_handler)

    log.info(
        "hookrelay_starting",
        version=__version__,
        secret_backend=settings.secrets.backend,
        secret_key=settings.secrets.key,
    )
    await server.start()

    try:
        if sys.platform == "win32":
            while not stop_event.is_set():
                await asyncio.sleep(1)
        else:
            await stop_event.wait()
    except KeyboardInterrupt:
        pass
    finally:
        await server.stop()


@click.group()
@click.version_option(__version__, prog_name="hookrelay")
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, log_level: str | None) -> None:
    """Relay GitHub webhooks to Discord."""
    settings = load_settings(config_path)
    if log_level:
        settings.log_level = log_level
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    ctx.obj = settings


@cli.command()
@click.option("--port", type=int, default=None, help="Override the listen port")
@click.pass_obj
def serve(settings: Settings, port: int | None) -> None:
    """Run the webhook HTTP server."""
    if port is not None:
        settings.server.port = port
    asyncio.run(run(settings))


@cli.command()
@click.pass_obj
def routes(settings: Settings) -> None:
    """Load the relay configuration secret and print its routing table."""
    provider = ConfigProvider(create_secret_store(settings.secrets), settings.secrets.key)
    try:
        config = provider.load()
    except RelayError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Secret: {settings.secrets.backend}:{settings.secrets.key}")
    click.echo(f"Discord token: {_redact_secret(config.discord_token)}")
    if not config.repositories:
        click.echo("No repositories configured.")
        return
    for name, route in sorted(config.repositories.items()):
        forum = f"  forum={route.forum_id}" if route.forum_id else ""
        click.echo(f"{name}  channel={route.channel_id}{forum}")


@cli.command(name="classify")
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--channel-id", default="0", show_default=True, help="Route channel id")
@click.option("--forum-id", default=None, help="Route forum id (routes releases to a thread)")
def classify_command(payload_file: Path, channel_id: str, forum_id: str | None) -> None:
    """Render the notification a webhook payload would produce, without sending it."""
    try:
        payload = parse_payload(decode_body(payload_file.read_bytes()))
    except RelayError as exc:
        raise click.ClickException(str(exc)) from exc

    intent = classify(payload, RepoRoute(channel_id=channel_id, forum_id=forum_id))
    if intent is None:
        click.echo("No notification for this event.")
    elif isinstance(intent, ChannelNotification):
        click.echo(f"-> channel {intent.channel_id}")
        click.echo(intent.text)
    elif isinstance(intent, ForumThreadNotification):
        click.echo(f"-> forum {intent.forum_id}, thread {json.dumps(intent.title, ensure_ascii=False)}")
        click.echo(intent.body)


if __name__ == "__main__":
    cli()
