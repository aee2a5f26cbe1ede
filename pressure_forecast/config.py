from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    DATABASE_URL: str = "sqlite+aiosqlite:///./pressure.db"

    DEBUG: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    OPENWEATHER_API_KEY: str = ""
    WEATHER_API_URL: str = "https://api.openweathermap.org/data/3.0/onecall"
    WEATHER_API_TIMEOUT: float = 10.0

    MAX_CONCURRENT_WEATHER_REQUESTS: int = 10

    # Seconds. Server tier is the durable one.
    SERVER_CACHE_TTL: int = 1800
    CLIENT_CACHE_TTL: int = 300

    # absolute | percent | percent-falling | level
    CLASSIFICATION_POLICY: str = "absolute"
    # ahead | behind
    LOOK_DIRECTION: str = "ahead"
    # 24 for hourly sources, 9 for 3-hourly ones
    FORECAST_WINDOW: int = 24
    TIMEZONE: str = "Asia/Tokyo"

    SERVE_STALE_ON_ERROR: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
