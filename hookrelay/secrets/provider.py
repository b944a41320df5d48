"""Loads ``RelayConfig`` from a secret store."""

from __future__ import annotations

from pydantic import ValidationError

from hookrelay.config import RelayConfig
from hookrelay.errors import SecretMalformed, SecretNotFound
from hookrelay.secrets.store import SecretStore
from hookrelay.utils.logging import get_logger

log = get_logger(__name__)


def _describe_errors(exc: ValidationError) -> str:
    # Never echo input values: the blob holds the bot token
    parts = []
    for error in exc.errors(include_input=False, include_url=False):
        loc = ".".join(str(p) for p in error["loc"]) or "<root>"
        parts.append(f"{loc}: {error['msg']}")
    return "; ".join(parts)


class ConfigProvider:
    """Fetches and parses the relay configuration on every call.

    Nothing is cached: a rotated token or a newly routed repository takes
    effect on the next webhook.
    """

    def __init__(self, store: SecretStore, key: str) -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> RelayConfig:
        raw = self._store.get_secret(self._key)
        if raw is None or not raw.strip():
            log.error("config_secret_missing", store=self._store.name, key=self._key)
            raise SecretNotFound(self._key)

        try:
            config = RelayConfig.model_validate_json(raw)
        except ValidationError as exc:
            log.error("config_secret_malformed", store=self._store.name, key=self._key)
            raise SecretMalformed(
                f"Configuration secret '{self._key}' is malformed: {_describe_errors(exc)}"
            ) from exc

        log.debug(
            "config_loaded",
            store=self._store.name,
            repositories=len(config.repositories),
        )
        return config
