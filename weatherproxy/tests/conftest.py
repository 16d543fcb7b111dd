"""Shared test fixtures."""

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import yaml

from weatherproxy.config.defaults import DEFAULT_CITIES
from weatherproxy.config.schema import ProxyConfig, UpstreamConfig
from weatherproxy.ingest.forecast_cache import ForecastCache

FIXTURE_DIR = Path(__file__).parent / "fixtures"
TEST_BASE_URL = "https://test-cwa.example.com/api"
TEST_FORECAST_URL = f"{TEST_BASE_URL}/v1/rest/datastore/F-C0032-001"


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 10, 18, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def load_fixture(name: str) -> dict:
    with open(FIXTURE_DIR / name, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's shell config out of every test."""
    for var in (
        "CWA_API_KEY", "UPSTREAM_TIMEOUT_SECONDS", "HOST", "PORT",
        "CORS_ORIGINS", "ENVIRONMENT", "NODE_ENV", "CACHE_TTL_MINUTES",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return FIXTURE_DIR


@pytest.fixture
def default_config() -> ProxyConfig:
    """Default config with a test API key and test upstream URL."""
    return ProxyConfig(
        upstream=UpstreamConfig(base_url=TEST_BASE_URL, api_key="CWA-TEST-KEY"),
        cities=DEFAULT_CITIES,
    )


@pytest.fixture
def keyless_config() -> ProxyConfig:
    return ProxyConfig(
        upstream=UpstreamConfig(base_url=TEST_BASE_URL, api_key=""),
        cities=DEFAULT_CITIES,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ForecastCache:
    return ForecastCache(ttl=timedelta(minutes=30), clock=clock)


@pytest.fixture
def taipei_forecast() -> dict:
    return load_fixture("cwa_forecast_taipei.json")


@pytest.fixture
def four_element_forecast() -> dict:
    return load_fixture("cwa_forecast_four_elements.json")


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "server": {"port": 8080, "environment": "production"},
        "cache": {"ttl_minutes": 15},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path
