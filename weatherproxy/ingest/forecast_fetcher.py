"""Forecast fetcher: resolves a city, serves from cache or calls the CWA API."""

import logging

import httpx

from weatherproxy.config.schema import ProxyConfig
from weatherproxy.errors import (
    ConfigurationError,
    MalformedUpstreamResponseError,
    UnsupportedCityError,
    UpstreamAuthError,
    UpstreamStatusError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from weatherproxy.ingest.cwa_client import CwaClient
from weatherproxy.ingest.forecast_cache import ForecastCache
from weatherproxy.ingest.transformer import extract_location, transform_forecast
from weatherproxy.models.forecast import WeatherLookup

logger = logging.getLogger(__name__)


class ForecastFetcher:
    def __init__(self, config: ProxyConfig, client: CwaClient, cache: ForecastCache):
        self.config = config
        self.client = client
        self.cache = cache
        self._cities = config.city_map

    @property
    def supported_cities(self) -> list[str]:
        return list(self._cities)

    def resolve(self, city: str) -> tuple[str, str]:
        """Map a city code (any case) to (key, localized name)."""
        key = city.strip().lower()
        name = self._cities.get(key)
        if name is None:
            raise UnsupportedCityError(city, self.supported_cities)
        return key, name

    def fetch(self, city: str) -> WeatherLookup:
        """Look up the forecast for a city code.

        Raises a ProxyError subclass for every failure; nothing is retried.
        """
        key, location_name = self.resolve(city)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return WeatherLookup(result=cached, cached=True)

        if not self.config.upstream.api_key:
            raise ConfigurationError("CWA_API_KEY is not configured")

        logger.debug("Cache miss for %s, calling CWA", key)
        raw = self._call_upstream(location_name)
        location, update_time = extract_location(raw, location_name)
        result = transform_forecast(location, key, update_time)
        self.cache.put(key, result)
        logger.info("Fetched %d forecast periods for %s", len(result.forecasts), key)
        return WeatherLookup(result=result, cached=False)

    def _call_upstream(self, location_name: str) -> dict:
        try:
            return self.client.get_forecast(location_name)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(
                f"CWA API did not respond within {self.client.timeout:g}s"
            ) from e
        except httpx.HTTPStatusError as e:
            raise _status_error(e.response) from e
        except httpx.RequestError as e:
            raise UpstreamUnavailableError(
                "Unable to reach the CWA API, please try again later"
            ) from e
        except ValueError as e:
            raise MalformedUpstreamResponseError("CWA API returned a non-JSON body") from e


def _status_error(response: httpx.Response) -> UpstreamAuthError | UpstreamStatusError:
    status = response.status_code
    if status in (401, 403):
        return UpstreamAuthError(
            "CWA API rejected the credential, check CWA_API_KEY"
        )
    try:
        details = response.json()
    except ValueError:
        details = response.text or None
    message = "Unable to fetch weather data"
    if isinstance(details, dict) and details.get("message"):
        message = str(details["message"])
    return UpstreamStatusError(status, message, details)
