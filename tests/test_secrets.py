"""Tests for secret stores and the configuration provider."""

import json

import boto3
import pytest
from botocore.stub import Stubber

from fakes import MemorySecretStore
from hookrelay.config import SecretsConfig
from hookrelay.errors import ConfigError, SecretMalformed, SecretNotFound
from hookrelay.secrets import (
    AwsSecretsManagerStore,
    ConfigProvider,
    EnvSecretStore,
    FileSecretStore,
    create_secret_store,
)

KEY = "hookrelay/relay-config"


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class TestEnvSecretStore:
    def test_env_name(self):
        assert EnvSecretStore.env_name("hookrelay/relay-config") == "HOOKRELAY_RELAY_CONFIG"
        assert EnvSecretStore.env_name("RELAY") == "RELAY"

    def test_lookup(self):
        store = EnvSecretStore({"HOOKRELAY_RELAY_CONFIG": '{"discordToken": "t"}'})
        assert store.get_secret(KEY) == '{"discordToken": "t"}'

    def test_missing(self):
        assert EnvSecretStore({}).get_secret(KEY) is None

    def test_defaults_to_process_env(self, monkeypatch):
        monkeypatch.setenv("RELAY_SECRET", "value")
        assert EnvSecretStore().get_secret("relay-secret") == "value"


class TestFileSecretStore:
    def test_lookup(self, tmp_path):
        (tmp_path / "hookrelay").mkdir()
        (tmp_path / "hookrelay" / "relay-config").write_text("blob")
        assert FileSecretStore(tmp_path).get_secret(KEY) == "blob"

    def test_missing(self, tmp_path):
        assert FileSecretStore(tmp_path).get_secret(KEY) is None

    def test_directory_is_not_a_secret(self, tmp_path):
        (tmp_path / "hookrelay" / "relay-config").mkdir(parents=True)
        assert FileSecretStore(tmp_path).get_secret(KEY) is None


@pytest.fixture
def sm_client():
    return boto3.client(
        "secretsmanager",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


class TestAwsSecretsManagerStore:
    def test_secret_string(self, sm_client):
        with Stubber(sm_client) as stub:
            stub.add_response(
                "get_secret_value",
                {"Name": KEY, "SecretString": '{"discordToken": "t"}'},
                {"SecretId": KEY},
            )
            store = AwsSecretsManagerStore(client=sm_client)
            assert store.get_secret(KEY) == '{"discordToken": "t"}'
            stub.assert_no_pending_responses()

    def test_secret_binary(self, sm_client):
        with Stubber(sm_client) as stub:
            stub.add_response(
                "get_secret_value",
                {"Name": KEY, "SecretBinary": b'{"discordToken": "t"}'},
                {"SecretId": KEY},
            )
            store = AwsSecretsManagerStore(client=sm_client)
            assert store.get_secret(KEY) == '{"discordToken": "t"}'

    def test_not_found(self, sm_client):
        with Stubber(sm_client) as stub:
            stub.add_client_error(
                "get_secret_value",
                service_error_code="ResourceNotFoundException",
                http_status_code=400,
            )
            assert AwsSecretsManagerStore(client=sm_client).get_secret(KEY) is None

    def test_access_denied(self, sm_client):
        with Stubber(sm_client) as stub:
            stub.add_client_error(
                "get_secret_value",
                service_error_code="AccessDeniedException",
                http_status_code=400,
            )
            with pytest.raises(ConfigError, match="AccessDeniedException"):
                AwsSecretsManagerStore(client=sm_client).get_secret(KEY)


class TestCreateSecretStore:
    def test_env(self):
        assert isinstance(create_secret_store(SecretsConfig(backend="env")), EnvSecretStore)

    def test_file(self, tmp_path):
        store = create_secret_store(SecretsConfig(backend="file", directory=str(tmp_path)))
        assert isinstance(store, FileSecretStore)

    def test_aws(self):
        store = create_secret_store(SecretsConfig(backend="aws", region="eu-west-1"))
        assert isinstance(store, AwsSecretsManagerStore)
        assert store.name == "aws"


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

class TestConfigProvider:
    def test_load(self, store):
        config = ConfigProvider(store, KEY).load()
        assert config.discord_token == "test-discord-token"
        assert set(config.repositories) == {"acme/widgets", "acme/gadgets"}
        assert store.lookups == [KEY]

    def test_loads_fresh_every_call(self, store, relay_secret):
        provider = ConfigProvider(store, KEY)
        assert provider.load().route_for("acme/new") is None

        relay_secret["repositories"]["acme/new"] = {"channelId": "C9"}
        store.secrets[KEY] = json.dumps(relay_secret)
        assert provider.load().route_for("acme/new").channel_id == "C9"
        assert len(store.lookups) == 2

    def test_secret_missing(self):
        with pytest.raises(SecretNotFound) as exc_info:
            ConfigProvider(MemorySecretStore(), KEY).load()
        assert exc_info.value.key == KEY

    def test_secret_blank(self):
        with pytest.raises(SecretNotFound):
            ConfigProvider(MemorySecretStore({KEY: "  \n"}), KEY).load()

    def test_secret_not_json(self):
        with pytest.raises(SecretMalformed):
            ConfigProvider(MemorySecretStore({KEY: "discordToken=abc"}), KEY).load()

    def test_secret_wrong_shape(self):
        blob = json.dumps({"discordToken": "s3cr3t-token", "repositories": {"a/b": {}}})
        with pytest.raises(SecretMalformed) as exc_info:
            ConfigProvider(MemorySecretStore({KEY: blob}), KEY).load()
        assert "repositories.a/b" in str(exc_info.value)
        assert "s3cr3t-token" not in str(exc_info.value)

    def test_routing_table_missing(self):
        blob = json.dumps({"discordToken": "t"})
        with pytest.raises(SecretMalformed, match="repositories"):
            ConfigProvider(MemorySecretStore({KEY: blob}), KEY).load()

    def test_errors_are_config_errors(self):
        assert issubclass(SecretNotFound, ConfigError)
        assert issubclass(SecretMalformed, ConfigError)
