"""Shared fixtures: routing secret, fake transports, payload builders."""

import json

import pytest

from fakes import SECRET_KEY, FakeTransport, MemorySecretStore
from hookrelay.core.delivery import NotificationDelivery
from hookrelay.secrets.provider import ConfigProvider
from hookrelay.webhooks.handler import RequestHandler



@pytest.fixture
def relay_secret():
    return {
        "discordToken": "test-discord-token",
        "repositories": {
            "acme/widgets": {"channelId": "C1"},
            "acme/gadgets": {"channelId": "C2", "forumId": "F2"},
        },
    }


@pytest.fixture
def store(relay_secret):
    return MemorySecretStore({SECRET_KEY: json.dumps(relay_secret)})


@pytest.fixture
def transport_options():
    """Keyword arguments for every FakeTransport the delivery creates."""
    return {}


@pytest.fixture
def transports():
    return []


@pytest.fixture
def delivery(transports, transport_options):
    def factory():
        transport = FakeTransport(**transport_options)
        transports.append(transport)
        return transport

    return NotificationDelivery(factory, ready_timeout=0.2)


@pytest.fixture
def request_handler(store, delivery):
    return RequestHandler(ConfigProvider(store, SECRET_KEY), delivery)


@pytest.fixture
def make_payload():
    def _make(action="opened", repo="acme/widgets", **entities):
        payload = {
            "action": action,
            "repository": {
                "full_name": repo,
                "name": repo.rsplit("/", 1)[-1],
                "owner": {"login": repo.split("/", 1)[0]},
            },
        }
        payload.update(entities)
        return payload

    return _make


@pytest.fixture
def issue():
    return {
        "number": 7,
        "title": "Bug X",
        "user": {"login": "alice"},
        "html_url": "https://x/1",
        "body": "It broke",
    }


@pytest.fixture
def pull_request():
    return {
        "number": 8,
        "title": "Fix bug X",
        "user": {"login": "bob"},
        "html_url": "https://x/pull/8",
        "merged": False,
    }


@pytest.fixture
def release():
    return {
        "tag_name": "v1.2.0",
        "name": "Widgets 1.2",
        "body": "- faster widgets\n- fewer bugs",
        "author": {"login": "carol"},
        "html_url": "https://x/releases/v1.2.0",
    }
