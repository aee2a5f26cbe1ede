"""
Pressure classification.

Turns a pressure level and a change (hPa or percent) into a
:class:`SeverityTier`. Several threshold policies exist side by side; a
caller picks one by name and applies it to a whole snapshot.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .schemas import SeverityTier


class ClassifierMode(str, Enum):
    ABSOLUTE_DELTA = "absolute-delta"
    PERCENT_DELTA = "percent-delta"
    ABSOLUTE_LEVEL = "absolute-level"


@dataclass(frozen=True)
class ClassificationPolicy:
    """Thresholds for one classification policy.

    Args:
        name: Configuration name of the policy
        mode: How the change is computed and whether the level fallback applies
        high_threshold: Change at or beyond which the tier is Danger
        low_threshold: Change at or beyond which the tier is Caution
        danger_level: Pressure (hPa) below which the level check gives Danger
        caution_level: Pressure (hPa) below which the level check gives Caution
        falling_only: Compare the signed change against negated thresholds
            instead of its absolute value, so only drops escalate
    """
    name: str
    mode: ClassifierMode
    high_threshold: float = 3.0
    low_threshold: float = 1.5
    danger_level: Optional[float] = None
    caution_level: Optional[float] = None
    falling_only: bool = False

    @property
    def change_unit(self) -> str:
        return "%" if self.mode is ClassifierMode.PERCENT_DELTA else "hPa"


ABSOLUTE_DELTA = ClassificationPolicy(
    name="absolute",
    mode=ClassifierMode.ABSOLUTE_DELTA,
    high_threshold=3.0,
    low_threshold=1.5,
    danger_level=1005.0,
    caution_level=1010.0,
)

PERCENT_DELTA = ClassificationPolicy(
    name="percent",
    mode=ClassifierMode.PERCENT_DELTA,
    high_threshold=3.0,
    low_threshold=1.5,
)

PERCENT_DELTA_FALLING = ClassificationPolicy(
    name="percent-falling",
    mode=ClassifierMode.PERCENT_DELTA,
    high_threshold=2.0,
    low_threshold=1.0,
    falling_only=True,
)

ABSOLUTE_LEVEL = ClassificationPolicy(
    name="level",
    mode=ClassifierMode.ABSOLUTE_LEVEL,
    danger_level=1005.0,
    caution_level=1010.0,
)

POLICIES: Dict[str, ClassificationPolicy] = {
    p.name: p for p in (ABSOLUTE_DELTA, PERCENT_DELTA, PERCENT_DELTA_FALLING, ABSOLUTE_LEVEL)
}


def get_policy(name: str) -> ClassificationPolicy:
    try:
        return POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown classification policy {name!r}; expected one of {sorted(POLICIES)}") from None


def pressure_change(current: float, reference: float, mode: ClassifierMode) -> float:
    """
    Change from ``reference`` to ``current``.

    Percent mode returns the change relative to ``reference`` (0 when the
    reference is 0). Level mode has no notion of change and returns 0.
    """
    if mode is ClassifierMode.PERCENT_DELTA:
        if reference == 0:
            return 0.0
        return (current - reference) / reference * 100
    if mode is ClassifierMode.ABSOLUTE_DELTA:
        return float(current - reference)
    return 0.0


def classify_level(level: float, policy: ClassificationPolicy) -> SeverityTier:
    if policy.danger_level is not None and level < policy.danger_level:
        return SeverityTier.DANGER
    if policy.caution_level is not None and level < policy.caution_level:
        return SeverityTier.CAUTION
    return SeverityTier.STABLE


def classify_change(level: float, change: float, policy: ClassificationPolicy) -> SeverityTier:
    """
    Classify a point at pressure ``level`` whose change is ``change``.

    Args:
        level: Absolute pressure of the point in hPa
        change: Change in the policy's unit (see :func:`pressure_change`)
        policy: Thresholds to apply

    Returns:
        Severity tier for the point
    """
    if policy.mode is ClassifierMode.ABSOLUTE_LEVEL:
        return classify_level(level, policy)

    magnitude = -change if policy.falling_only else abs(change)
    if magnitude >= policy.high_threshold:
        return SeverityTier.DANGER
    if magnitude >= policy.low_threshold:
        return SeverityTier.CAUTION

    if policy.mode is ClassifierMode.ABSOLUTE_DELTA:
        return classify_level(level, policy)
    return SeverityTier.STABLE


def classify(current: float, reference: float, policy: ClassificationPolicy = ABSOLUTE_DELTA) -> SeverityTier:
    """Classify ``current`` against ``reference`` under ``policy``."""
    change = pressure_change(current, reference, policy.mode)
    return classify_change(current, change, policy)
