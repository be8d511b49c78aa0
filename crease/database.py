"""
All-time stats storage. SQLite by default, any SQLAlchemy URL via DATABASE_URL.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from crease.config import settings


def _connect_args(url: str) -> dict:
    # Stats are written from API background tasks on worker threads
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_url,
    connect_args=_connect_args(settings.database_url),
    echo=False,
)
SessionLocal = sessionmaker(bind=engine)


class Base(DeclarativeBase):
    pass


def init_db():
    """Create the stats tables if they are missing"""
    from crease.models import stats  # noqa
    Base.metadata.create_all(bind=engine)


def get_session():
    """New session for scripts and the stats writer (caller must close)"""
    return SessionLocal()
