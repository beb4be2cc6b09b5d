"""Database schema and utilities for the persistent holiday cache."""

from __future__ import annotations

import logging

from sqlalchemy import JSON, Column, DateTime, Integer, String, UniqueConstraint, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

DEFAULT_DB_URL = "sqlite:///holiday_cache.db"


class Base(DeclarativeBase):
    """Declarative base for the holiday cache schema."""
    pass


class HolidayCacheRecord(Base):
    """One cached holiday list per (country_code, year)."""

    __tablename__ = "holiday_cache"
    __table_args__ = (UniqueConstraint("country_code", "year", name="uq_holiday_cache_country_year"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    country_code = Column(String(2), nullable=False)
    year = Column(Integer, nullable=False)
    holidays_json = Column(JSON, nullable=False)  # list of holiday dicts
    fetched_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<HolidayCacheRecord(country={self.country_code}, year={self.year}, fetched_at={self.fetched_at})>"


def create_db_engine(db_url: str = DEFAULT_DB_URL, echo: bool = False):
    """Build the SQLAlchemy engine for a holiday cache URL.

    In-memory SQLite is pinned to a single shared connection so that every
    session (and every thread) sees the same tables.
    """
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            db_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(db_url, echo=echo)


def init_database(engine) -> None:
    """Create the holiday_cache table if it is missing."""
    Base.metadata.create_all(engine)
    logger.info("Holiday cache schema ready: %s", engine.url)


def get_session_factory(engine):
    """Session factory whose objects stay readable after commit."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def reset_database(engine) -> None:
    """Empty the holiday cache by recreating its table; every country refetches afterwards."""
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    logger.warning("Holiday cache reset: %s", engine.url)
