"""
Shared test doubles: a controllable upstream and clock.
"""
import asyncio
from typing import List, Optional, Sequence, Tuple

from pressure_forecast.schemas import PressureReading, RawSeries

BASE_TS = 1_700_000_000  # 2023-11-14 22:13:20 UTC
HOUR = 3600


def make_series(pressures: Sequence[float], start: int = BASE_TS, step: int = HOUR) -> Tuple[PressureReading, ...]:
    return tuple(PressureReading(start + i * step, p) for i, p in enumerate(pressures))


class FakeUpstream:
    """Stands in for ``OpenWeatherClient.fetch_raw_series``."""

    def __init__(self, pressures: Sequence[float] = (1013, 1012, 1010), delay: float = 0.0):
        self.series = RawSeries(readings=make_series(pressures))
        self.error: Optional[Exception] = None
        self.delay = delay
        self.calls: List[Tuple[float, float]] = []

    async def __call__(self, lat: float, lon: float) -> RawSeries:
        self.calls.append((lat, lon))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.series


class FakeClock:
    def __init__(self, start: float = float(BASE_TS)):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
