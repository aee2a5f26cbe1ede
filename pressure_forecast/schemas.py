"""
Pydantic data model for pressure readings, forecast points and snapshots.

All models are frozen: a snapshot handed out by the cache can never be
mutated by a caller.
"""
from datetime import datetime
from enum import Enum
from functools import total_ordering
from typing import List, Literal, NamedTuple, Tuple

from pydantic import BaseModel, ConfigDict, Field

CURRENT_LABEL = "current"
MAX_FORECAST_POINTS = 24


@total_ordering
class SeverityTier(Enum):
    """Severity of a pressure state, ordered Stable < Caution < Danger."""
    STABLE = "stable"
    CAUTION = "caution"
    DANGER = "danger"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, SeverityTier):
            return NotImplemented
        return self.rank < other.rank


_TIER_RANK = {SeverityTier.STABLE: 0, SeverityTier.CAUTION: 1, SeverityTier.DANGER: 2}


class PressureReading(NamedTuple):
    """One raw upstream sample: unix seconds and pressure in hPa."""
    timestamp: int
    pressure_hpa: float


class RawSeries(NamedTuple):
    """Parsed upstream payload.

    ``readings[0]`` is the current observation, the rest are forecast
    readings in timestamp order. ``history`` holds readings older than the
    current one, oldest first.
    """
    readings: Tuple[PressureReading, ...]
    history: Tuple[PressureReading, ...] = ()


class ForecastPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    pressure_hpa: int
    tier: SeverityTier


class WeatherSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    region: str = ""
    pressure_hpa: int
    pressure_change: float
    change_unit: Literal["hPa", "%"] = "hPa"
    tier: SeverityTier
    forecast: List[ForecastPoint] = Field(max_length=MAX_FORECAST_POINTS)
    produced_at: datetime
    served_from_cache: bool = False
    degraded: bool = False
