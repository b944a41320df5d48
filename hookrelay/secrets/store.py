"""Key-value secret stores holding the relay configuration blob."""

from __future__ import annotations

import os
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from hookrelay.config import SecretsConfig
from hookrelay.errors import ConfigError
from hookrelay.utils.logging import get_logger

log = get_logger(__name__)

_ENV_NAME_RE = re.compile(r"[^A-Z0-9_]")


class SecretStore(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def get_secret(self, key: str) -> str | None:
        """Return the secret stored under ``key``, or None if there is none."""


class EnvSecretStore(SecretStore):
    """Reads the secret from an environment variable.

    The key is upper-cased and every character outside ``[A-Z0-9_]`` becomes
    ``_``, so ``hookrelay/relay-config`` is read from ``HOOKRELAY_RELAY_CONFIG``.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    @property
    def name(self) -> str:
        return "env"

    @staticmethod
    def env_name(key: str) -> str:
        return _ENV_NAME_RE.sub("_", key.upper())

    def get_secret(self, key: str) -> str | None:
        return self._environ.get(self.env_name(key))


class FileSecretStore(SecretStore):
    """Reads the secret from ``<directory>/<key>`` (e.g. a mounted secret volume)."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    @property
    def name(self) -> str:
        return "file"

    def get_secret(self, key: str) -> str | None:
        path = self._directory / key
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read secret file {path}: {exc}") from exc


class AwsSecretsManagerStore(SecretStore):
    """AWS Secrets Manager via boto3.

    Credentials resolve the usual boto3 way (env vars, shared credentials
    file, or the IAM role when running on AWS).
    """

    def __init__(
        self,
        region: str | None = None,
        profile: str | None = None,
        client: Any = None,
    ) -> None:
        if client is None:
            session = boto3.Session(profile_name=profile, region_name=region)
            client = session.client("secretsmanager")
        self._client = client

    @property
    def name(self) -> str:
        return "aws"

    def get_secret(self, key: str) -> str | None:
        try:
            response = self._client.get_secret_value(SecretId=key)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "Unknown")
            if code == "ResourceNotFoundException":
                return None
            log.error("secret_lookup_failed", key=key, code=code)
            raise ConfigError(f"Secrets Manager lookup of '{key}' failed: {code}") from exc
        except BotoCoreError as exc:
            log.error("secret_lookup_failed", key=key, error=str(exc))
            raise ConfigError(f"Secrets Manager lookup of '{key}' failed: {exc}") from exc

        if "SecretString" in response:
            return response["SecretString"]
        binary = response.get("SecretBinary")
        if binary is None:
            return None
        return binary.decode("utf-8")


def create_secret_store(config: SecretsConfig) -> SecretStore:
    if config.backend == "aws":
        return AwsSecretsManagerStore(region=config.region, profile=config.profile)
    if config.backend == "env":
        return EnvSecretStore()
    if config.backend == "file":
        return FileSecretStore(config.directory)
    raise ValueError(f"Unknown secret backend: {config.backend}")
