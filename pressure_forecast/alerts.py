"""
Human-readable alert and advice text for a snapshot.
"""
from typing import Optional

from .schemas import SeverityTier, WeatherSnapshot

# Leading forecast points, "current" included, scanned for a sharp change
ALERT_LOOKAHEAD_POINTS: int = 6


def hours_until_danger(snapshot: WeatherSnapshot, lookahead: int = ALERT_LOOKAHEAD_POINTS) -> Optional[int]:
    """
    Index of the first Danger point among ``forecast[1:lookahead]``, or None.

    Point 0 is the current reading and is reported through the snapshot tier.
    """
    for i, point in enumerate(snapshot.forecast[1:lookahead], start=1):
        if point.tier is SeverityTier.DANGER:
            return i
    return None


def alert_message(snapshot: WeatherSnapshot) -> str:
    if snapshot.tier is SeverityTier.DANGER:
        if snapshot.pressure_change < 0:
            return "Pressure is dropping sharply. Watch out for headaches."
        return "Pressure is rising sharply. Pay attention to how you feel."

    hours = hours_until_danger(snapshot)
    if hours is not None:
        unit = "hour" if hours == 1 else "hours"
        return f"A sharp pressure change is forecast in {hours} {unit}. Consider taking precautions early."

    if snapshot.tier is SeverityTier.CAUTION:
        return "Pressure is fluctuating. Pay attention to how you feel."

    return "Pressure is stable. Have a good day."


def advice(snapshot: WeatherSnapshot) -> str:
    if snapshot.tier is SeverityTier.DANGER:
        if snapshot.pressure_change < 0:
            return "A large pressure drop is expected. Try to rest early. Risk: high"
        return "A large pressure rise is expected. Remember to stay hydrated. Risk: high"
    if snapshot.tier is SeverityTier.CAUTION:
        return "Pressure keeps changing. Keep your activity within comfortable limits. Risk: medium"
    return "Pressure is stable. Normal activity is fine. Risk: low"
