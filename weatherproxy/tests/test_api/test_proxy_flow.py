"""End-to-end lookups through the app and a real CwaClient against a mocked CWA API."""

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from weatherproxy.app import create_app
from weatherproxy.config.schema import ProxyConfig
from weatherproxy.ingest.forecast_cache import ForecastCache

FORECAST_URL = "https://test-cwa.example.com/api/v1/rest/datastore/F-C0032-001"


@pytest.fixture
def api(default_config: ProxyConfig, cache: ForecastCache) -> TestClient:
    return TestClient(create_app(default_config, cache=cache))


class TestProxyFlow:
    @respx.mock
    def test_cached_after_first_call(self, api: TestClient, four_element_forecast: dict):
        route = respx.get(FORECAST_URL).mock(
            return_value=httpx.Response(200, json=four_element_forecast)
        )

        first = api.get("/api/weather/Kaohsiung").json()
        second = api.get("/api/weather/kaohsiung").json()

        assert route.call_count == 1
        assert route.calls[0].request.url.params["locationName"] == "高雄市"
        assert first["cached"] is False
        assert second["cached"] is True
        assert second["data"] == first["data"]
        forecasts = first["data"]["forecasts"]
        assert len(forecasts) == 3
        assert all(f["comfort"] == "" and f["windSpeed"] == "" for f in forecasts)

    @respx.mock
    def test_ttl_expiry_refetches(self, api: TestClient, taipei_forecast: dict, clock):
        route = respx.get(FORECAST_URL).mock(
            return_value=httpx.Response(200, json=taipei_forecast)
        )

        api.get("/api/weather/taipei")
        clock.advance(minutes=31)
        body = api.get("/api/weather/taipei").json()

        assert body["cached"] is False
        assert route.call_count == 2

    @respx.mock
    def test_timeout_is_504(self, api: TestClient):
        respx.get(FORECAST_URL).mock(side_effect=httpx.ReadTimeout)
        assert api.get("/api/weather/taipei").status_code == 504

    @respx.mock
    def test_unauthorized_is_500(self, api: TestClient):
        respx.get(FORECAST_URL).mock(
            return_value=httpx.Response(401, json={"message": "Unauthorized"})
        )
        resp = api.get("/api/weather/taipei")
        assert resp.status_code == 500
        assert "credential" in resp.json()["message"]

    @respx.mock
    def test_rate_limit_passthrough(self, api: TestClient):
        respx.get(FORECAST_URL).mock(
            return_value=httpx.Response(429, json={"message": "API rate limit exceeded"})
        )
        resp = api.get("/api/weather/taipei")
        assert resp.status_code == 429
        body = resp.json()
        assert body["success"] is False
        assert body["message"] == "API rate limit exceeded"
        assert body["details"] == {"message": "API rate limit exceeded"}

    @respx.mock
    def test_cache_clear_forces_refetch(self, api: TestClient, taipei_forecast: dict):
        route = respx.get(FORECAST_URL).mock(
            return_value=httpx.Response(200, json=taipei_forecast)
        )

        api.get("/api/weather/taipei")
        api.post("/api/cache/clear")
        api.get("/api/weather/taipei")

        assert route.call_count == 2
