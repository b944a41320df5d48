"""Delivery of notification intents through a single-use chat session."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from hookrelay.errors import DeliveryTimeout
from hookrelay.models import ChannelNotification, ForumThreadNotification, NotificationIntent
from hookrelay.transports.base import Transport
from hookrelay.utils.logging import get_logger

log = get_logger(__name__)

TransportFactory = Callable[[], Transport]

DEFAULT_READY_TIMEOUT = 10.0


class NotificationDelivery:
    """Opens a fresh transport per delivery and always closes it.

    Session states: login -> wait for ready (bounded by ``ready_timeout``)
    -> send -> close. ``close`` runs exactly once on every exit path; a
    failure while closing is logged and never replaces the delivery outcome.
    """

    def __init__(
        self,
        transport_factory: TransportFactory,
        ready_timeout: float = DEFAULT_READY_TIMEOUT,
    ) -> None:
        self._transport_factory = transport_factory
        self._ready_timeout = ready_timeout

    @asynccontextmanager
    async def session(self, token: str) -> AsyncIterator[Transport]:
        transport = self._transport_factory()
        try:
            await transport.login(token)
            try:
                await asyncio.wait_for(
                    transport.wait_until_ready(), timeout=self._ready_timeout
                )
            except asyncio.TimeoutError as exc:
                log.error(
                    "delivery_ready_timeout",
                    platform=transport.platform_name,
                    timeout=self._ready_timeout,
                )
                raise DeliveryTimeout(self._ready_timeout) from exc
            yield transport
        finally:
            await self._release(transport)

    async def deliver(self, token: str, intent: NotificationIntent) -> None:
        async with self.session(token) as transport:
            if isinstance(intent, ChannelNotification):
                await transport.send_text(intent.channel_id, intent.text)
                log.info(
                    "delivery_sent",
                    platform=transport.platform_name,
                    target="channel",
                    channel_id=intent.channel_id,
                )
            elif isinstance(intent, ForumThreadNotification):
                await transport.create_thread(intent.forum_id, intent.title, intent.body)
                log.info(
                    "delivery_sent",
                    platform=transport.platform_name,
                    target="forum_thread",
                    forum_id=intent.forum_id,
                    title=intent.title,
                )
            else:
                raise TypeError(f"Unsupported notification intent: {intent!r}")

    async def _release(self, transport: Transport) -> None:
        try:
            await transport.close()
        except Exception:
            log.exception("delivery_session_close_failed", platform=transport.platform_name)
