"""Chat platform transports."""

from hookrelay.transports.base import Transport
from hookrelay.transports.discord_transport import DiscordTransport

__all__ = [
    "Transport",
    "DiscordTransport",
]
