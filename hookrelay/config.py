"""Configuration management with Pydantic Settings + optional YAML.

Two layers live here:

- ``Settings``: process-level settings (where the secret lives, server bind,
  logging), read from ``HOOKRELAY_*`` env vars with an optional YAML overlay.
- ``RelayConfig``: the Discord token and per-repository routing table, read
  from the secret store on every request by ``hookrelay.secrets.ConfigProvider``.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ---------------------------------------------------------------------------
# Routing configuration (secret blob)
# ---------------------------------------------------------------------------

class RepoRoute(BaseModel):
    model_config = ConfigDict(frozen=True)

    channel_id: str = Field(validation_alias=AliasChoices("channelId", "channel_id"))
    forum_id: str | None = Field(
        default=None, validation_alias=AliasChoices("forumId", "forum_id")
    )

    @field_validator("channel_id", "forum_id", mode="before")
    @classmethod
    def _coerce_snowflake(cls, v: Any) -> Any:
        # Discord ids are often pasted as bare JSON numbers
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if v == "":
            return None
        return v

    @field_validator("channel_id")
    @classmethod
    def _require_channel(cls, v: str | None) -> str:
        if not v:
            raise ValueError("channelId cannot be empty")
        return v


class RelayConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    discord_token: str = Field(
        validation_alias=AliasChoices("discordToken", "discord_token"), min_length=1
    )
    repositories: dict[str, RepoRoute]

    def route_for(self, full_name: str) -> RepoRoute | None:
        return self.repositories.get(full_name)


# ---------------------------------------------------------------------------
# Process settings
# ---------------------------------------------------------------------------

class SecretsConfig(BaseModel):
    backend: Literal["aws", "env", "file"] = "aws"
    key: str = "hookrelay/relay-config"
    region: str | None = None
    profile: str | None = None
    directory: str = "/run/secrets"


class DiscordConfig(BaseModel):
    ready_timeout: float = 10.0
    message_limit: int = 2000

    @field_validator("ready_timeout")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("ready_timeout must be positive")
        return v


class ServerConfig(BaseModel):
    bind: str = "0.0.0.0"
    port: int = 8420
    path: str = "/webhook"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HOOKRELAY_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    secrets: SecretsConfig = Field(default_factory=SecretsConfig)
    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"
    log_json: bool = False


def default_config_dir() -> Path:
    env = os.environ.get("HOOKRELAY_CONFIG_DIR")
    if env:
        return Path(env)
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming")) / "hookrelay"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "hookrelay"


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from env vars, optionally overlaying a YAML config."""
    yaml_data: dict[str, Any] = {}

    if config_path is None:
        config_path = os.environ.get("HOOKRELAY_CONFIG")
    if config_path is None:
        default = default_config_dir() / "config.yaml"
        if default.exists():
            config_path = default

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                yaml_data = yaml.safe_load(f) or {}

    # Init kwargs take priority over env vars in pydantic-settings
    return Settings(**yaml_data)
