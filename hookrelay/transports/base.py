"""Abstract chat transport.

A transport is one session against a chat platform. It is used for exactly
one delivery and closed afterwards; ``NotificationDelivery`` drives the
lifecycle.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class Transport(ABC):
    @property
    @abstractmethod
    def platform_name(self) -> str: ...

    @abstractmethod
    async def login(self, token: str) -> None: ...

    @abstractmethod
    async def wait_until_ready(self) -> None:
        """Block until the session can send; raise if the platform gives up first."""

    @abstractmethod
    async def send_text(self, channel_id: str, content: str) -> None: ...

    @abstractmethod
    async def create_thread(self, forum_id: str, title: str, content: str) -> None:
        """Open a forum discussion thread with ``content`` as its first message."""

    @abstractmethod
    async def close(self) -> None: ...
