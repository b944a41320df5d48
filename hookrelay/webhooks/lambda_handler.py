"""AWS Lambda entry point for API Gateway proxy integrations.

Settings, the secret store client and the Discord session are all built per
invocation; nothing is kept warm between calls.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
from typing import Any

from hookrelay.config import load_settings
from hookrelay.utils.logging import get_logger, setup_logging
from hookrelay.webhooks.handler import (
    RequestHandler,
    WebhookResponse,
    create_request_handler,
    error_response,
)

log = get_logger(__name__)


def _to_proxy_result(response: WebhookResponse) -> dict[str, Any]:
    return {
        "statusCode": response.status,
        "headers": {"Content-Type": "application/json"},
        "body": response.to_json(),
    }


def _header(event: dict[str, Any], name: str) -> str | None:
    headers = event.get("headers") or {}
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _event_body(event: dict[str, Any]) -> bytes | str | dict[str, Any] | None:
    body = event.get("body")
    if isinstance(body, str) and event.get("isBase64Encoded"):
        return base64.b64decode(body, validate=True)
    return body


def handler(
    event: dict[str, Any],
    context: Any,
    request_handler: RequestHandler | None = None,
) -> dict[str, Any]:
    try:
        settings = load_settings()
        setup_logging(level=settings.log_level, json_output=settings.log_json)
        log.info("lambda_invoked", request_id=getattr(context, "aws_request_id", None))
        body = _event_body(event)
        if request_handler is None:
            request_handler = create_request_handler(settings)
    except binascii.Error as exc:
        log.error("lambda_bad_event", error=str(exc))
        return _to_proxy_result(error_response(exc))
    except Exception as exc:
        log.exception("lambda_setup_failed")
        return _to_proxy_result(error_response(exc))

    response = asyncio.run(
        request_handler.handle(
            body,
            event=_header(event, "x-github-event"),
            delivery_id=_header(event, "x-github-delivery"),
        )
    )
    return _to_proxy_result(response)
