"""Notification intents produced by the classifier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ChannelNotification:
    channel_id: str
    text: str


@dataclass(frozen=True)
class ForumThreadNotification:
    """A new discussion thread in a forum channel; ``body`` is its opening message."""

    forum_id: str
    title: str
    body: str


NotificationIntent = Union[ChannelNotification, ForumThreadNotification]
