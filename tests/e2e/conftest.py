import os
import shutil
import subprocess

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from testcontainers.postgres import PostgresContainer

from samples.db.seed import init_db


def _docker_available() -> bool:
    if not shutil.which("docker"):
        return False
    try:
        proc = subprocess.run(["docker", "info"], capture_output=True, text=True, timeout=5)
    except (OSError, subprocess.SubprocessError):
        return False
    return proc.returncode == 0


@pytest.fixture(scope="session")
def postgres_url():
    """Connection URL of a throwaway Postgres container."""
    if os.getenv("SKIP_DOCKER_TESTS") == "1":
        pytest.skip("SKIP_DOCKER_TESTS=1")
    if not _docker_available():
        pytest.skip("Docker daemon is not available; skipping e2e tests that require containers")
    image = os.getenv("TEST_POSTGRES_IMAGE", "postgres:16-alpine")
    with PostgresContainer(image, driver="psycopg2") as pg:
        yield pg.get_connection_url()


@pytest.fixture
def pg_engine(postgres_url):
    engine = create_engine(postgres_url)
    from samples.db import models

    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)
    db = sessionmaker(bind=engine)()
    try:
        init_db(engine, db)
    finally:
        db.close()
    try:
        yield engine
    finally:
        models.Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def pg_sessions(pg_engine):
    factory = sessionmaker(bind=pg_engine, autoflush=False, autocommit=False)
    primary, observer = factory(), factory()
    try:
        yield primary, observer
    finally:
        primary.close()
        observer.close()
