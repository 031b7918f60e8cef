"""
Database engine and session management.

Builds SQLAlchemy engines from ``Settings`` and hands out sessions. SQLite
URLs get the connection arguments needed to share a connection across
threads (FastAPI runs sync endpoints in a threadpool); in-memory SQLite also
gets a ``StaticPool`` so the schema survives across connections.
"""
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from datastore.config import Settings, get_settings


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith("sqlite:"))


def engine_kwargs_for(url: str) -> dict:
    """Return extra ``create_engine`` keyword arguments for ``url``."""
    if not url.startswith("sqlite"):
        return {}
    kwargs = {"connect_args": {"check_same_thread": False}}
    if _is_memory_sqlite(url):
        kwargs["poolclass"] = StaticPool
    return kwargs


def create_engine_from_settings(settings: Optional[Settings] = None, url: Optional[str] = None) -> Engine:
    settings = settings or get_settings()
    database_url = url or settings.database_url
    return create_engine(database_url, echo=settings.echo_sql, **engine_kwargs_for(database_url))


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """Yield a session and close it when the caller is done."""
    db = factory()
    try:
        yield db
    finally:
        db.close()
