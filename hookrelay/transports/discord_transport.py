"""Discord transport using discord.py."""

from __future__ import annotations

import asyncio
import contextlib

import discord

from hookrelay.config import DiscordConfig
from hookrelay.core.chunker import DISCORD_THREAD_NAME_LIMIT, chunk_message, truncate
from hookrelay.errors import DeliveryError, TargetNotFound, WrongTargetType
from hookrelay.transports.base import Transport
from hookrelay.utils.logging import get_logger

log = get_logger(__name__)

_TEXT_TARGETS = (discord.TextChannel, discord.Thread)


class DiscordTransport(Transport):
    def __init__(
        self,
        config: DiscordConfig | None = None,
        client: discord.Client | None = None,
    ) -> None:
        self._config = config or DiscordConfig()

        if client is None:
            # Posting needs no privileged intents
            intents = discord.Intents.none()
            intents.guilds = True
            client = discord.Client(intents=intents)

        self._client = client
        self._connect_task: asyncio.Task[None] | None = None

    @property
    def platform_name(self) -> str:
        return "discord"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def login(self, token: str) -> None:
        try:
            await self._client.login(token)
        except (discord.LoginFailure, discord.HTTPException) as exc:
            raise DeliveryError(f"Discord login failed: {exc}") from exc

        self._connect_task = asyncio.create_task(
            self._client.connect(reconnect=False),
            name="discord-gateway",
        )
        log.debug("discord_logged_in")

    async def wait_until_ready(self) -> None:
        if self._connect_task is None:
            raise DeliveryError("Discord client is not logged in")

        ready = asyncio.ensure_future(self._client.wait_until_ready())
        try:
            done, _ = await asyncio.wait(
                {ready, self._connect_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            if not ready.done():
                ready.cancel()

        if ready in done:
            log.debug("discord_ready", user=str(self._client.user))
            return

        # The gateway task ended before READY arrived
        error = None
        if not self._connect_task.cancelled():
            error = self._connect_task.exception()
        reason = str(error) if error else "connection closed"
        raise DeliveryError(f"Discord gateway closed before ready: {reason}") from error

    async def close(self) -> None:
        try:
            await self._client.close()
        finally:
            task, self._connect_task = self._connect_task, None
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            elif task is not None and not task.cancelled() and task.exception() is not None:
                # Gateway died after READY; retrieve it so asyncio does not report it
                log.debug("discord_gateway_failed", error=str(task.exception()))
        log.debug("discord_client_closed")

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def send_text(self, channel_id: str, content: str) -> None:
        channel = await self._resolve(channel_id)
        if not isinstance(channel, _TEXT_TARGETS):
            raise WrongTargetType(channel_id, "text")

        try:
            for chunk in chunk_message(content, limit=self._config.message_limit):
                await channel.send(chunk)
        except discord.DiscordException as exc:
            raise DeliveryError(f"Failed to send to channel {channel_id}: {exc}") from exc

        log.debug("discord_message_sent", channel_id=channel_id)

    async def create_thread(self, forum_id: str, title: str, content: str) -> None:
        forum = await self._resolve(forum_id)
        if not isinstance(forum, discord.ForumChannel):
            raise WrongTargetType(forum_id, "forum")

        chunks = chunk_message(content, limit=self._config.message_limit)
        try:
            created = await forum.create_thread(
                name=truncate(title, DISCORD_THREAD_NAME_LIMIT),
                content=chunks[0],
            )
            for chunk in chunks[1:]:
                await created.thread.send(chunk)
        except discord.DiscordException as exc:
            raise DeliveryError(f"Failed to create thread in forum {forum_id}: {exc}") from exc

        log.debug("discord_thread_created", forum_id=forum_id, thread_id=created.thread.id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _resolve(self, target_id: str) -> object:
        try:
            snowflake = int(target_id)
        except ValueError:
            raise TargetNotFound(target_id) from None

        channel = self._client.get_channel(snowflake)
        if channel is not None:
            return channel

        try:
            channel = await self._client.fetch_channel(snowflake)
        except discord.NotFound:
            raise TargetNotFound(target_id) from None
        except discord.DiscordException as exc:
            raise DeliveryError(f"Cannot fetch channel {target_id}: {exc}") from exc

        if channel is None:
            raise TargetNotFound(target_id)
        return channel
