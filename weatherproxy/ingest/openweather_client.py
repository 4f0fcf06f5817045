"""OpenWeatherMap forecast API client. Single attempt, no retries."""

import logging
import time

import httpx

from weatherproxy.config.defaults import DEFAULT_UPSTREAM_TIMEOUT, OPENWEATHER_BASE_URL
from weatherproxy.errors import CityNotFoundError, UpstreamError, UpstreamTimeoutError
from weatherproxy.models.forecast import ForecastRecord

logger = logging.getLogger(__name__)


class OpenWeatherClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = OPENWEATHER_BASE_URL,
        timeout: float = DEFAULT_UPSTREAM_TIMEOUT,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch_forecast(self, city: str) -> ForecastRecord:
        """Fetch the 5-day / 3-hour forecast for a city name.

        ``timeout`` is a deadline for the whole call, body included: httpx
        bounds each network wait and the deadline is checked between body
        chunks, so a slowly trickling response is abandoned too. Any failure
        raises an UpstreamError subclass; nothing is retried.
        """
        url = f"{self.base_url}/forecast"
        params = {"q": city, "appid": self.api_key}
        deadline = time.monotonic() + self.timeout
        try:
            with httpx.stream("GET", url, params=params, timeout=self.timeout) as resp:
                body = self._read_body(resp, deadline, city)
        except httpx.TimeoutException as e:
            raise self._timed_out(city) from e
        except httpx.RequestError as e:
            logger.error("OpenWeather request failed for city=%s: %s", city, e)
            raise UpstreamError(f"Upstream request failed for {city!r}: {e}") from e

        if resp.status_code == 404:
            logger.info("OpenWeather has no city=%s", city)
            raise CityNotFoundError(city)
        if resp.status_code >= 400:
            logger.error(
                "OpenWeather %d for city=%s: %s",
                resp.status_code, city, body[:200].decode("utf-8", "replace"),
            )
            raise UpstreamError(
                f"Upstream returned HTTP {resp.status_code} for {city!r}",
                upstream_status=resp.status_code,
            )

        try:
            return ForecastRecord.from_json(body)
        except ValueError as e:
            logger.error("OpenWeather returned an unusable body for city=%s: %s", city, e)
            raise UpstreamError(f"Upstream returned a malformed forecast for {city!r}") from e

    def _read_body(self, resp: httpx.Response, deadline: float, city: str) -> bytes:
        chunks: list[bytes] = []
        if time.monotonic() >= deadline:
            raise self._timed_out(city)
        for chunk in resp.iter_bytes():
            chunks.append(chunk)
            if time.monotonic() >= deadline:
                raise self._timed_out(city)
        return b"".join(chunks)

    def _timed_out(self, city: str) -> UpstreamTimeoutError:
        logger.error("OpenWeather timed out after %.1fs for city=%s", self.timeout, city)
        return UpstreamTimeoutError(f"Upstream timed out after {self.timeout:g}s for {city!r}")

    def ping(self) -> bool:
        """Cheap reachability probe. Any HTTP answer counts as reachable."""
        try:
            httpx.get(self.base_url, timeout=self.timeout)
            return True
        except httpx.RequestError:
            return False
