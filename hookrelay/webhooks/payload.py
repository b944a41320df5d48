"""Decoding raw webhook bodies into ``WebhookPayload``."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ValidationError

from hookrelay.errors import PayloadError
from hookrelay.webhooks.models import (
    Issue,
    PullRequest,
    Release,
    Repository,
    WebhookPayload,
)

# First present key wins. Well-formed GitHub payloads carry at most one.
ENTITY_PRECEDENCE: tuple[tuple[str, type[BaseModel]], ...] = (
    ("issue", Issue),
    ("pull_request", PullRequest),
    ("release", Release),
)


def decode_body(body: bytes | str | dict[str, Any]) -> dict[str, Any]:
    """Decode a request body into a JSON object.

    Already-decoded dicts are passed through; API Gateway test invocations
    hand the payload over as an object rather than a string.
    """
    if isinstance(body, dict):
        return body
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise PayloadError(f"Invalid JSON body: {exc}") from exc
    if not isinstance(data, dict):
        raise PayloadError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def parse_payload(data: dict[str, Any]) -> WebhookPayload:
    """Build a ``WebhookPayload`` from a decoded GitHub webhook body."""
    try:
        repository = Repository.model_validate(data.get("repository"))
        entity = None
        for key, model in ENTITY_PRECEDENCE:
            raw = data.get(key)
            if raw is not None:
                entity = model.model_validate(raw)
                break
        action = data.get("action") or ""
        return WebhookPayload(action=action, repository=repository, entity=entity)
    except ValidationError as exc:
        raise PayloadError(f"Unexpected webhook payload shape: {exc}") from exc
