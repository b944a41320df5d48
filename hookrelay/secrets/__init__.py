"""Secret stores and the per-request configuration provider."""

from hookrelay.secrets.provider import ConfigProvider
from hookrelay.secrets.store import (
    AwsSecretsManagerStore,
    EnvSecretStore,
    FileSecretStore,
    SecretStore,
    create_secret_store,
)

__all__ = [
    "AwsSecretsManagerStore",
    "ConfigProvider",
    "EnvSecretStore",
    "FileSecretStore",
    "SecretStore",
    "create_secret_store",
]
