"""YAML config loader with environment overrides and redacted dumps."""

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from weatherproxy.config.defaults import DEFAULT_CITIES
from weatherproxy.config.schema import ProxyConfig

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = ".env"


class EnvSettings(BaseSettings):
    """Values read from the process environment and an optional .env file.

    Unset variables stay None and leave the YAML/default value alone.
    """

    cwa_api_key: str | None = None
    upstream_timeout_seconds: float | None = None
    host: str | None = None
    port: int | None = None
    cors_origins: Annotated[list[str] | None, NoDecode] = None
    # ENVIRONMENT wins over NODE_ENV when both are set
    environment: str | None = Field(
        default=None, validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV")
    )
    cache_ttl_minutes: float | None = None

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=DEFAULT_ENV_FILE,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_cors_origins(v)
        return v


# EnvSettings field -> (section, field)
ENV_FIELDS: dict[str, tuple[str, str]] = {
    "cwa_api_key": ("upstream", "api_key"),
    "upstream_timeout_seconds": ("upstream", "timeout_seconds"),
    "host": ("server", "host"),
    "port": ("server", "port"),
    "cors_origins": ("server", "cors_origins"),
    "environment": ("server", "environment"),
    "cache_ttl_minutes": ("cache", "ttl_minutes"),
}


def load_config(
    path: str | Path | None = None, env_file: str | Path | None = DEFAULT_ENV_FILE
) -> ProxyConfig:
    """Load and validate config from an optional YAML file plus the environment.

    If no cities are specified in the YAML, injects DEFAULT_CITIES. Values
    from the environment (and `env_file`, when it exists) override the file.
    Pass env_file=None to ignore .env files.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}

    if "cities" not in raw or not raw["cities"]:
        raw["cities"] = [c.model_dump() for c in DEFAULT_CITIES]

    apply_env_overrides(raw, EnvSettings(_env_file=env_file))
    return ProxyConfig(**raw)


def apply_env_overrides(raw: dict[str, Any], env: EnvSettings) -> dict[str, Any]:
    """Overlay the set environment values onto a raw config dict in place."""
    for name, (section, field) in ENV_FIELDS.items():
        value = getattr(env, name)
        if value is None:
            continue
        raw.setdefault(section, {})[field] = value
        logger.debug("Config %s.%s set from environment", section, field)
    return raw


def parse_cors_origins(value: str) -> list[str]:
    """Split a comma-separated origin list. A bare '*' allows any origin."""
    origins = [o.strip() for o in value.split(",") if o.strip()]
    if not origins or "*" in origins:
        return ["*"]
    return origins


def redacted_config(config: ProxyConfig) -> dict[str, Any]:
    """Dump the config with the API key replaced by its presence and length."""
    data = json.loads(config.model_dump_json())
    key = config.upstream.api_key
    data["upstream"].pop("api_key", None)
    data["upstream"]["api_key_configured"] = bool(key)
    data["upstream"]["api_key_length"] = len(key)
    return data
