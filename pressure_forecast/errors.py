"""
Error taxonomy for the weather core.

Callers can tell client errors (bad region, unusable data) apart from
transient upstream failures via ``retryable``.
"""


class WeatherError(Exception):
    """Base class for all weather core failures."""
    retryable: bool = False


class UnknownRegion(WeatherError):
    """Region id is not in the coordinate table."""

    def __init__(self, region_id: str):
        super().__init__(f"Unknown region: {region_id!r}")
        self.region_id = region_id


class InsufficientData(WeatherError):
    """Upstream returned an empty or malformed pressure series."""


class UpstreamUnavailable(WeatherError):
    """Transport error, timeout or rate limit from the weather provider."""
    retryable = True


class MisconfiguredCredentials(WeatherError):
    """API key missing or rejected by the provider."""
