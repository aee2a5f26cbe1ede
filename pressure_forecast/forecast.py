"""
Forecast transformation.

Validates the raw upstream payload into :class:`PressureReading` tuples and
turns an ordered series into a classified :class:`WeatherSnapshot`.
"""
import datetime
import logging
import math
from enum import Enum
from numbers import Real
from typing import Any, Dict, List, Optional, Sequence

from .classifier import ABSOLUTE_DELTA, ClassificationPolicy, ClassifierMode, classify_change, pressure_change
from .errors import InsufficientData
from .schemas import (
    CURRENT_LABEL,
    MAX_FORECAST_POINTS,
    ForecastPoint,
    PressureReading,
    RawSeries,
    WeatherSnapshot,
)

logger = logging.getLogger(__name__)

# Window sizes by upstream step
HOURLY_WINDOW: int = 24
THREE_HOURLY_WINDOW: int = 9


class LookDirection(str, Enum):
    """Which neighbour the current point's change is computed against."""
    AHEAD = "ahead"
    BEHIND = "behind"


def round_hpa(value: float) -> int:
    """Round to the nearest whole hPa, halves away from zero."""
    return int(math.floor(abs(value) + 0.5)) * (1 if value >= 0 else -1)


def hour_label(timestamp: int, tz: datetime.tzinfo = datetime.timezone.utc) -> str:
    """Format a unix timestamp as ``HH:00`` in ``tz``."""
    t = datetime.datetime.fromtimestamp(timestamp, tz=tz)
    return f"{t.hour:02d}:00"


def _finite_number(value: Any, where: str, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InsufficientData(f"{where}: missing or non-numeric '{field}'")
    try:
        number = float(value)
    except OverflowError:
        raise InsufficientData(f"{where}: '{field}' is out of range") from None
    if not math.isfinite(number):
        raise InsufficientData(f"{where}: '{field}' is not finite")
    return number


def _parse_reading(item: Any, where: str) -> PressureReading:
    if not isinstance(item, dict):
        raise InsufficientData(f"{where}: expected an object, got {type(item).__name__}")
    dt = _finite_number(item.get("dt"), where, "dt")
    try:
        datetime.datetime.fromtimestamp(dt, tz=datetime.timezone.utc)
    except (OverflowError, OSError, ValueError):
        raise InsufficientData(f"{where}: 'dt' is not a valid timestamp") from None
    pressure = _finite_number(item.get("pressure"), where, "pressure")
    if pressure <= 0:
        raise InsufficientData(f"{where}: 'pressure' must be positive")
    return PressureReading(int(dt), pressure)


def parse_onecall(payload: Dict[str, Any]) -> RawSeries:
    """
    Validate a One Call response into a :class:`RawSeries`.

    The ``current`` block becomes the first reading. Hourly entries older
    than it go to ``history``; entries at the same timestamp are dropped;
    later entries follow as the forecast. Without a ``current`` block the
    first hourly entry stands in for it.

    Raises:
        InsufficientData: payload has no usable pressure readings
    """
    if not isinstance(payload, dict):
        raise InsufficientData("Upstream payload is not a JSON object")

    hourly_raw = payload.get("hourly") or []
    if not isinstance(hourly_raw, list):
        raise InsufficientData("'hourly' is not a list")
    hourly = sorted(
        (_parse_reading(h, f"hourly[{i}]") for i, h in enumerate(hourly_raw)),
        key=lambda r: r.timestamp,
    )

    current_raw = payload.get("current")
    if current_raw is not None:
        current = _parse_reading(current_raw, "current")
    elif hourly:
        current, hourly = hourly[0], hourly[1:]
    else:
        raise InsufficientData("Upstream payload has no pressure readings")

    history = tuple(r for r in hourly if r.timestamp < current.timestamp)
    ahead = tuple(r for r in hourly if r.timestamp > current.timestamp)
    return RawSeries(readings=(current,) + ahead, history=history)


def _change_unit_value(change: float, policy: ClassificationPolicy) -> float:
    if policy.mode is ClassifierMode.PERCENT_DELTA:
        return round(change, 2)
    return float(change)


def transform(
    series: Sequence[PressureReading],
    window_size: int = HOURLY_WINDOW,
    policy: ClassificationPolicy = ABSOLUTE_DELTA,
    look: LookDirection = LookDirection.AHEAD,
    history: Sequence[PressureReading] = (),
    region: str = "",
    tz: datetime.tzinfo = datetime.timezone.utc,
    now: Optional[datetime.datetime] = None,
) -> WeatherSnapshot:
    """
    Build a classified snapshot from an ordered pressure series.

    Args:
        series: Readings, current one first
        window_size: Maximum number of leading readings to keep
        policy: Classification policy applied to every point
        look: Whether the current point compares with the next reading
            (``AHEAD``) or with the latest reading in ``history`` (``BEHIND``)
        history: Readings older than ``series[0]``, oldest first
        region: Region id stamped on the snapshot
        tz: Timezone used for ``HH:00`` labels
        now: Production time, defaults to the current UTC time

    Returns:
        WeatherSnapshot whose ``forecast[0]`` mirrors the snapshot itself

    Raises:
        InsufficientData: ``series`` is empty
    """
    if not series:
        raise InsufficientData("Pressure series is empty")
    if window_size < 1:
        raise ValueError("window_size must be at least 1")

    window = list(series)[: min(window_size, MAX_FORECAST_POINTS)]
    pressures: List[int] = [round_hpa(r.pressure_hpa) for r in window]

    current = pressures[0]
    if look is LookDirection.AHEAD and len(pressures) > 1:
        current_change = pressure_change(pressures[1], current, policy.mode)
    elif look is LookDirection.BEHIND and history:
        current_change = pressure_change(current, round_hpa(history[-1].pressure_hpa), policy.mode)
    else:
        current_change = 0.0
    current_tier = classify_change(current, current_change, policy)

    points = [ForecastPoint(label=CURRENT_LABEL, pressure_hpa=current, tier=current_tier)]
    for i in range(1, len(window)):
        change = pressure_change(pressures[i], pressures[i - 1], policy.mode)
        points.append(
            ForecastPoint(
                label=hour_label(window[i].timestamp, tz),
                pressure_hpa=pressures[i],
                tier=classify_change(pressures[i], change, policy),
            )
        )

    logger.debug(
        "Transformed %d readings for %s: current=%s change=%s tier=%s",
        len(window), region or "<unnamed>", current, current_change, current_tier.value,
    )
    return WeatherSnapshot(
        region=region,
        pressure_hpa=current,
        pressure_change=_change_unit_value(current_change, policy),
        change_unit=policy.change_unit,
        tier=current_tier,
        forecast=points,
        produced_at=now or datetime.datetime.now(datetime.timezone.utc),
    )
