"""
Upstream weather provider client.

Fetches hourly pressure forecasts from the OpenWeatherMap One Call API and
hands them to the parsing boundary in :mod:`pressure_forecast.forecast`.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from .config import settings
from .errors import InsufficientData, MisconfiguredCredentials, UpstreamUnavailable
from .forecast import parse_onecall
from .schemas import RawSeries

logger = logging.getLogger(__name__)


class OpenWeatherClient:
    """
    Async client for the One Call endpoint.

    Args:
        api_key: OpenWeatherMap API key
        url: One Call endpoint URL
        timeout: Per-request timeout in seconds
        max_concurrent: Upper bound on simultaneous upstream requests
        transport: Optional httpx transport (tests pass a MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_concurrent: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.OPENWEATHER_API_KEY if api_key is None else api_key
        self.url = url or settings.WEATHER_API_URL
        self.timeout = settings.WEATHER_API_TIMEOUT if timeout is None else timeout
        # Semaphore to limit concurrent API requests (prevents rate limiting)
        self._sem = asyncio.Semaphore(max_concurrent or settings.MAX_CONCURRENT_WEATHER_REQUESTS)
        self._transport = transport

    def check_credentials(self) -> None:
        if not self.api_key:
            raise MisconfiguredCredentials("OPENWEATHER_API_KEY is not set")

    async def fetch_onecall(self, lat: float, lon: float) -> Dict[str, Any]:
        """
        Fetch the raw One Call payload for a coordinate.

        Raises:
            MisconfiguredCredentials: No API key, or the provider rejected it
            UpstreamUnavailable: Timeout, transport error, rate limit or
                any other non-success status
            InsufficientData: Body is not JSON
        """
        self.check_credentials()
        params = {
            "lat": lat,
            "lon": lon,
            "exclude": "minutely,daily,alerts",
            "units": "metric",
            "appid": self.api_key,
        }
        async with self._sem:
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    r = await client.get(self.url, params=params)
            except httpx.TimeoutException as exc:
                logger.error("Weather API timed out for (%s, %s)", lat, lon)
                raise UpstreamUnavailable("Weather API request timed out") from exc
            except httpx.HTTPError as exc:
                logger.error("Weather API request failed: %s", exc)
                raise UpstreamUnavailable(f"Weather API request failed: {exc}") from exc

        if r.status_code in (401, 403):
            logger.error("Weather API rejected credentials: HTTP %s", r.status_code)
            raise MisconfiguredCredentials(f"Weather API rejected the API key (HTTP {r.status_code})")
        if r.status_code == 429:
            logger.warning("Weather API rate limit hit")
            raise UpstreamUnavailable("Weather API rate limit exceeded")
        if r.status_code >= 400:
            logger.error("Weather API returned HTTP %s: %s", r.status_code, r.text[:200])
            raise UpstreamUnavailable(f"Weather API error: HTTP {r.status_code}")

        try:
            return r.json()
        except ValueError as exc:
            raise InsufficientData("Weather API returned a non-JSON body") from exc

    async def fetch_raw_series(self, lat: float, lon: float) -> RawSeries:
        """Fetch and validate the pressure series for a coordinate."""
        payload = await self.fetch_onecall(lat, lon)
        series = parse_onecall(payload)
        logger.info(
            "Fetched %d readings (+%d history) for (%s, %s)",
            len(series.readings), len(series.history), lat, lon,
        )
        return series
