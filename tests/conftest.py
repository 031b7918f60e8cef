import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Keep the sample app's module-level engine away from any real database.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from datastore import ExecutionStrategy
from datastore.config import refresh_settings_cache
from samples.db import models
from samples.db.seed import seed_sample_data
from samples.store import SampleDataStore


@pytest.fixture(autouse=True)
def _fresh_settings():
    refresh_settings_cache()
    yield
    refresh_settings_cache()


@pytest.fixture
def engine(tmp_path):
    # File-backed so that separate sessions use separate connections.
    eng = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'store.db'}",
        connect_args={"check_same_thread": False},
    )
    models.Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture
def SessionLocal(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def seeded(SessionLocal):
    """Seed the catalog through a throwaway session."""
    db = SessionLocal()
    try:
        seed_sample_data(db)
    finally:
        db.close()


@pytest.fixture
def db_session(SessionLocal, seeded):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db_session):
    return SampleDataStore(db_session, execution_strategy=ExecutionStrategy())


@pytest.fixture
def other_session(SessionLocal, seeded):
    """Independent session for checking what was actually committed."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    from samples.api.main import app
    from samples.database import get_db

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)
