"""
SQLAlchemy database models.

Defines the durable server-side weather cache.
"""
from sqlalchemy import Column, Integer, String, JSON, DateTime
from sqlalchemy.sql import func
from .db import Base


class WeatherCache(Base):
    """
    Server-tier weather cache, one row per region.

    Stores the serialized WeatherSnapshot as a JSON blob. The row is
    overwritten in place on every refresh; freshness is judged by the
    cache tier from ``fetched_at``.
    """
    __tablename__ = "weather_cache"

    id = Column(Integer, primary_key=True)
    region = Column(String, nullable=False, unique=True)
    data = Column(JSON, nullable=False)  # WeatherSnapshot.model_dump(mode="json")
    fetched_at = Column(DateTime(timezone=True), server_default=func.now())
