"""
Engine and session wiring for the sample application.

The engine is built from ``datastore.config`` settings at import time; tests
replace ``get_db`` through FastAPI dependency overrides.
"""
from datastore.config import get_settings
from datastore.database import create_engine_from_settings, make_session_factory, session_scope

engine = create_engine_from_settings(get_settings())

SessionLocal = make_session_factory(engine)


def get_db():
    """Dependency to get a database session."""
    yield from session_scope(SessionLocal)
