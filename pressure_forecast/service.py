"""
Weather fetch orchestration.

``WeatherService.get_weather`` walks the client tier, then the server tier,
and only on a double miss resolves the region and calls the upstream.
"""
import asyncio
import datetime
import logging
import time
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .cache import CacheStore, CacheTier, Clock, SqlStore
from .classifier import ClassificationPolicy, get_policy
from .config import Settings
from .errors import UpstreamUnavailable
from .forecast import LookDirection, transform
from .locations import resolve
from .schemas import RawSeries, WeatherSnapshot
from .weather import OpenWeatherClient

logger = logging.getLogger(__name__)

SeriesFetcher = Callable[[float, float], Awaitable[RawSeries]]


class WeatherService:
    """
    Sole entry point of the weather core.

    Args:
        fetch_raw_series: Coroutine ``(lat, lon) -> RawSeries`` for the upstream
        policy: Classification policy for every snapshot
        look: Look direction of the current point
        window_size: Number of leading readings kept per snapshot
        server_ttl: Server tier TTL in seconds
        client_ttl: Client tier TTL in seconds
        server_store: Durable store for the server tier (memory if omitted)
        client_store: Store for the client tier (memory if omitted)
        fetch_timeout: Bound on a single upstream fetch, in seconds
        serve_stale_on_error: Return an expired snapshot flagged ``degraded``
            when a refresh fails with UpstreamUnavailable
        tz: Timezone for forecast labels
        clock: Epoch-seconds clock shared by both tiers
    """

    def __init__(
        self,
        fetch_raw_series: SeriesFetcher,
        policy: ClassificationPolicy,
        look: LookDirection = LookDirection.AHEAD,
        window_size: int = 24,
        server_ttl: float = 1800,
        client_ttl: float = 300,
        server_store: Optional[CacheStore] = None,
        client_store: Optional[CacheStore] = None,
        fetch_timeout: Optional[float] = None,
        serve_stale_on_error: bool = False,
        tz: datetime.tzinfo = datetime.timezone.utc,
        clock: Clock = time.time,
    ):
        self._fetch_raw_series = fetch_raw_series
        self.policy = policy
        self.look = look
        self.window_size = window_size
        self.fetch_timeout = fetch_timeout
        self.serve_stale_on_error = serve_stale_on_error
        self.tz = tz
        self.server = CacheTier("server", server_ttl, self._fetch_and_transform, server_store, clock)
        self.client = CacheTier("client", client_ttl, self._load_from_server, client_store, clock)

    async def get_weather(self, region_id: str) -> WeatherSnapshot:
        """
        Return the snapshot for ``region_id``.

        Raises:
            UnknownRegion, InsufficientData, UpstreamUnavailable,
            MisconfiguredCredentials
        """
        try:
            snapshot, fresh = await self.client.get(region_id)
        except UpstreamUnavailable:
            stale = await self._stale_snapshot(region_id) if self.serve_stale_on_error else None
            if stale is None:
                raise
            logger.warning("Serving stale snapshot for %s after upstream failure", region_id)
            return stale.model_copy(update={"served_from_cache": True, "degraded": True})

        if not fresh and not snapshot.served_from_cache:
            snapshot = snapshot.model_copy(update={"served_from_cache": True})
        return snapshot

    async def _load_from_server(self, region_id: str) -> WeatherSnapshot:
        snapshot, fresh = await self.server.get(region_id)
        # Marks whether this value reached the client tier straight from the upstream
        return snapshot.model_copy(update={"served_from_cache": not fresh})

    async def _fetch_and_transform(self, region_id: str) -> WeatherSnapshot:
        coord = resolve(region_id)
        logger.info("Fetching upstream weather for %s at (%s, %s)", region_id, coord.lat, coord.lon)
        try:
            if self.fetch_timeout:
                series = await asyncio.wait_for(self._fetch_raw_series(coord.lat, coord.lon), self.fetch_timeout)
            else:
                series = await self._fetch_raw_series(coord.lat, coord.lon)
        except asyncio.TimeoutError as exc:
            raise UpstreamUnavailable(f"Upstream fetch for {region_id} timed out") from exc
        return transform(
            series.readings,
            window_size=self.window_size,
            policy=self.policy,
            look=self.look,
            history=series.history,
            region=region_id,
            tz=self.tz,
        )

    async def _stale_snapshot(self, region_id: str) -> Optional[WeatherSnapshot]:
        # The most recently stored entry wins, whichever tier holds it
        entries = [e for e in (await self.client.peek(region_id), await self.server.peek(region_id)) if e is not None]
        if not entries:
            return None
        return max(entries, key=lambda e: e.stored_at).value

    async def invalidate(self, region_id: str) -> None:
        await self.client.invalidate(region_id)
        await self.server.invalidate(region_id)


def build_weather_service(
    settings: Settings,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    client: Optional[OpenWeatherClient] = None,
) -> WeatherService:
    """Wire a WeatherService from settings; the server tier is SQL-backed when a session factory is given."""
    client = client or OpenWeatherClient(
        api_key=settings.OPENWEATHER_API_KEY,
        url=settings.WEATHER_API_URL,
        timeout=settings.WEATHER_API_TIMEOUT,
        max_concurrent=settings.MAX_CONCURRENT_WEATHER_REQUESTS,
    )
    return WeatherService(
        fetch_raw_series=client.fetch_raw_series,
        policy=get_policy(settings.CLASSIFICATION_POLICY),
        look=LookDirection(settings.LOOK_DIRECTION),
        window_size=settings.FORECAST_WINDOW,
        server_ttl=settings.SERVER_CACHE_TTL,
        client_ttl=settings.CLIENT_CACHE_TTL,
        server_store=SqlStore(session_factory) if session_factory is not None else None,
        fetch_timeout=settings.WEATHER_API_TIMEOUT,
        serve_stale_on_error=settings.SERVE_STALE_ON_ERROR,
        tz=ZoneInfo(settings.TIMEZONE),
    )
