"""CWA open-data API client with a bounded request timeout."""

import logging
import time
from collections.abc import Callable

import httpx

from weatherproxy.config.schema import CWA_BASE_URL, FORECAST_DATASET_ID

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "weatherproxy/0.1.0"


class CwaClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = CWA_BASE_URL,
        dataset_id: str = FORECAST_DATASET_ID,
        timeout: float = 8.0,
        user_agent: str = DEFAULT_USER_AGENT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.dataset_id = dataset_id
        self.timeout = timeout
        self.user_agent = user_agent
        self._clock = clock

    @property
    def forecast_url(self) -> str:
        return f"{self.base_url}/v1/rest/datastore/{self.dataset_id}"

    def get_forecast(self, location_name: str) -> dict:
        """Fetch the 36-hour forecast for one location.

        `timeout` bounds the whole call, not only each connect/read: the body
        is streamed and the deadline checked after every chunk. No retries.
        Raises httpx.TimeoutException, httpx.HTTPStatusError or another
        httpx.RequestError; a non-JSON body raises ValueError.
        """
        params = {"Authorization": self.api_key, "locationName": location_name}
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        deadline = self._clock() + self.timeout
        try:
            with httpx.stream(
                "GET", self.forecast_url,
                params=params, headers=headers, timeout=self.timeout,
            ) as resp:
                chunks = []
                for chunk in resp.iter_bytes():
                    chunks.append(chunk)
                    if self._clock() > deadline:
                        raise httpx.ReadTimeout(
                            f"response not complete within {self.timeout:g}s",
                            request=resp.request,
                        )
                # decoded body, so drop content-encoding/length
                body = httpx.Response(
                    resp.status_code,
                    headers={"Content-Type": resp.headers.get("content-type", "application/json")},
                    content=b"".join(chunks),
                    request=resp.request,
                )
            body.raise_for_status()
            return body.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "CWA API returned %d for location=%s",
                e.response.status_code, location_name,
            )
            raise
        except httpx.TimeoutException:
            logger.error(
                "CWA API timed out after %.1fs for location=%s",
                self.timeout, location_name,
            )
            raise
        except httpx.RequestError as e:
            logger.error("CWA API request failed for location=%s: %s", location_name, e)
            raise
