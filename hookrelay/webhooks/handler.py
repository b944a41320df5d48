"""Per-request orchestration: payload -> config -> classification -> delivery.

``RequestHandler`` is transport-agnostic; the aiohttp server and the Lambda
entry point both hand it the raw body and serialize the ``WebhookResponse``
it returns. It is the single failure boundary: every exception ends up as a
status code here.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

import structlog

from hookrelay.config import Settings
from hookrelay.core.classifier import classify
from hookrelay.core.delivery import NotificationDelivery
from hookrelay.errors import BadRequest, ConfigNotFound, RelayError
from hookrelay.secrets.provider import ConfigProvider
from hookrelay.secrets.store import SecretStore, create_secret_store
from hookrelay.transports.discord_transport import DiscordTransport
from hookrelay.utils.logging import get_logger
from hookrelay.webhooks.payload import decode_body, parse_payload

log = get_logger(__name__)

SUCCESS_MESSAGE = "Webhook processed successfully"
INTERNAL_ERROR_MESSAGE = "Internal server error"


@dataclass(frozen=True)
class WebhookResponse:
    status: int
    body: dict[str, str] = field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps(self.body)


def error_response(exc: BaseException) -> WebhookResponse:
    """500 response surfacing the error text for diagnostics."""
    return WebhookResponse(500, {"message": INTERNAL_ERROR_MESSAGE, "error": str(exc)})


class RequestHandler:
    def __init__(self, config_provider: ConfigProvider, delivery: NotificationDelivery) -> None:
        self._config_provider = config_provider
        self._delivery = delivery

    async def handle(
        self,
        body: bytes | str | dict[str, Any] | None,
        *,
        event: str | None = None,
        delivery_id: str | None = None,
    ) -> WebhookResponse:
        context = {"github_event": event, "github_delivery": delivery_id}
        with structlog.contextvars.bound_contextvars(
            **{k: v for k, v in context.items() if v}
        ):
            try:
                return await self._process(body)
            except RelayError as exc:
                if exc.status < 500:
                    log.warning("webhook_rejected", status=exc.status, reason=str(exc))
                    return WebhookResponse(exc.status, {"message": str(exc)})
                log.error("webhook_failed", error=str(exc), error_type=type(exc).__name__)
                return error_response(exc)
            except Exception as exc:
                log.exception("webhook_unhandled_error")
                return error_response(exc)

    async def _process(self, body: bytes | str | dict[str, Any] | None) -> WebhookResponse:
        if not body:
            raise BadRequest()

        data = decode_body(body)
        log.debug("webhook_payload", payload=data)
        payload = parse_payload(data)
        repository = payload.repository.full_name
        log.info(
            "webhook_received",
            repository=repository,
            action=payload.action,
            entity=payload.entity_kind.value if payload.entity_kind else None,
        )

        # boto3 is blocking
        config = await asyncio.to_thread(self._config_provider.load)

        route = config.route_for(repository)
        if route is None:
            raise ConfigNotFound(repository)

        intent = classify(payload, route)
        if intent is None:
            log.info("webhook_skipped", repository=repository, action=payload.action)
        else:
            await self._delivery.deliver(config.discord_token, intent)

        return WebhookResponse(200, {"message": SUCCESS_MESSAGE})


def create_request_handler(
    settings: Settings, store: SecretStore | None = None
) -> RequestHandler:
    """Wire a RequestHandler from settings; ``store`` overrides the configured backend."""
    if store is None:
        store = create_secret_store(settings.secrets)
    provider = ConfigProvider(store, settings.secrets.key)
    delivery = NotificationDelivery(
        lambda: DiscordTransport(settings.discord),
        ready_timeout=settings.discord.ready_timeout,
    )
    return RequestHandler(provider, delivery)
