from fastapi import FastAPI, Depends, HTTPException, Request

from .alerts import advice, alert_message
from .config import settings
from .db import async_session, create_tables
from .errors import InsufficientData, MisconfiguredCredentials, UnknownRegion, UpstreamUnavailable
from .locations import list_regions, PREFECTURE_COORDINATES
from .log import configure_logging
from .schemas import WeatherSnapshot
from .service import WeatherService, build_weather_service

import logging

logger = logging.getLogger(__name__)

app = FastAPI(title="Pressure Forecast")


@app.on_event("startup")
async def startup():
    configure_logging()
    if not settings.OPENWEATHER_API_KEY:
        logger.error("OPENWEATHER_API_KEY is not set; refusing to start")
        raise MisconfiguredCredentials("OPENWEATHER_API_KEY is not set")
    await create_tables()
    app.state.weather_service = build_weather_service(settings, async_session)
    logger.info(
        "Weather service ready policy=%s look=%s window=%d server_ttl=%ds client_ttl=%ds",
        settings.CLASSIFICATION_POLICY, settings.LOOK_DIRECTION, settings.FORECAST_WINDOW,
        settings.SERVER_CACHE_TTL, settings.CLIENT_CACHE_TTL,
    )


def get_weather_service(request: Request) -> WeatherService:
    """Dependency returning the service built at startup."""
    return request.app.state.weather_service


# ---------- Regions ----------
@app.get("/api/regions")
def regions():
    return list_regions()

@app.get("/api/regions/{region_id}")
def region_details(region_id: str):
    coord = PREFECTURE_COORDINATES.get(region_id)
    if not coord:
        raise HTTPException(404, "Unknown region")
    return {"region": region_id, "lat": coord.lat, "lon": coord.lon}

# ---------- Weather ----------
async def _load_weather(service: WeatherService, region_id: str) -> WeatherSnapshot:
    try:
        return await service.get_weather(region_id)
    except UnknownRegion:
        raise HTTPException(404, "Unknown region")
    except InsufficientData as e:
        raise HTTPException(status_code=502, detail=f"Upstream returned unusable data: {e}")
    except UpstreamUnavailable as e:
        raise HTTPException(status_code=503, detail=f"Upstream weather error: {e}")
    except MisconfiguredCredentials:
        logger.error("Weather provider credentials are misconfigured")
        raise HTTPException(status_code=500, detail="Weather provider is misconfigured")

@app.get("/api/weather/{region_id}", response_model=WeatherSnapshot)
async def weather(region_id: str, service: WeatherService = Depends(get_weather_service)):
    return await _load_weather(service, region_id)

@app.get("/api/weather/{region_id}/alert")
async def weather_alert(region_id: str, service: WeatherService = Depends(get_weather_service)):
    snapshot = await _load_weather(service, region_id)
    return {
        "region": region_id,
        "tier": snapshot.tier.value,
        "message": alert_message(snapshot),
        "advice": advice(snapshot),
        "degraded": snapshot.degraded,
    }
