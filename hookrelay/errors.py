"""Exception hierarchy for the relay.

Every error carries the HTTP status the request handler answers with, so the
handler can map outcomes without knowing which component raised.
"""

from __future__ import annotations


class RelayError(Exception):
    status: int = 500


class BadRequest(RelayError):
    status = 400

    def __init__(self, message: str = "No body provided") -> None:
        super().__init__(message)


class ConfigNotFound(RelayError):
    """No route is configured for the webhook's repository."""

    status = 404

    def __init__(self, repository: str) -> None:
        super().__init__("No configuration found for repository")
        self.repository = repository


class PayloadError(RelayError):
    """The request body is not JSON or does not look like a GitHub webhook."""


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigError(RelayError):
    pass


class SecretNotFound(ConfigError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Configuration not found in secret store under '{key}'")
        self.key = key


class SecretMalformed(ConfigError):
    pass


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------

class DeliveryError(RelayError):
    pass


class DeliveryTimeout(DeliveryError):
    def __init__(self, timeout: float) -> None:
        super().__init__(f"Chat client was not ready within {timeout:g}s")
        self.timeout = timeout


class TargetNotFound(DeliveryError):
    def __init__(self, target_id: str) -> None:
        super().__init__(f"Channel {target_id} not found")
        self.target_id = target_id


class WrongTargetType(DeliveryError):
    def __init__(self, target_id: str, expected: str) -> None:
        super().__init__(f"Channel {target_id} is not a {expected} channel")
        self.target_id = target_id
        self.expected = expected
