import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from weather_push.core.settings import get_settings

logger = logging.getLogger(__name__)


def make_engine(database_url: str):
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection so every session sees the same in-memory DB
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url)


_settings = get_settings()
engine = make_engine(_settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None) -> None:
    """Create tables if they don't exist."""
    from .models import Base

    Base.metadata.create_all(bind=bind or engine)


# Auto-create tables for local/dev unless disabled with DB_AUTO_CREATE=0
if _settings.db_auto_create:
    try:
        init_db()
    except Exception as e:
        # Don't crash at import time; the store surfaces errors per call
        logger.warning("Skipped auto-create tables: %s", e)


# FastAPI dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
