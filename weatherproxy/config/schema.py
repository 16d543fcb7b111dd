"""Pydantic v2 configuration schema with strict validation."""

from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

CWA_BASE_URL = "https://opendata.cwa.gov.tw/api"
FORECAST_DATASET_ID = "F-C0032-001"  # 36-hour general forecast


class Environment(StrEnum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


class CityConfig(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    key: str
    name: str

    @field_validator("key")
    @classmethod
    def _lowercase_key(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("city key must not be empty")
        return v


class UpstreamConfig(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    base_url: str = CWA_BASE_URL
    dataset_id: str = FORECAST_DATASET_ID
    api_key: str = ""
    timeout_seconds: float = Field(default=8.0, gt=0.0, le=30.0)


class ServerConfig(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    cors_origins: list[str] = ["*"]
    environment: Environment = Environment.DEVELOPMENT


class CacheConfig(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    ttl_minutes: float = Field(default=30.0, gt=0.0)


class ProxyConfig(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    upstream: UpstreamConfig = UpstreamConfig()
    server: ServerConfig = ServerConfig()
    cache: CacheConfig = CacheConfig()
    cities: list[CityConfig] = []

    @field_validator("cities")
    @classmethod
    def _unique_keys(cls, v: list[CityConfig]) -> list[CityConfig]:
        keys = [c.key for c in v]
        if len(keys) != len(set(keys)):
            raise ValueError("duplicate city keys")
        return v

    @property
    def city_map(self) -> dict[str, str]:
        return {c.key: c.name for c in self.cities}

    @property
    def is_development(self) -> bool:
        return self.server.environment == Environment.DEVELOPMENT
