"""Shared setup for the console demos."""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from datastore.config import get_settings
from datastore.database import create_engine_from_settings, make_session_factory
from samples.db.seed import init_db
from samples.store import SampleDataStore

DEMO_DATABASE_URL = "sqlite+pysqlite:///:memory:"


def configure_logging(level_name: Optional[str] = None) -> None:
    level_name = (level_name or get_settings().log_level).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format="%(levelname)s %(name)s: %(message)s")


@contextmanager
def demo_store(database_url: str = DEMO_DATABASE_URL) -> Iterator[SampleDataStore]:
    """Yield a store over a freshly created and seeded database."""
    engine = create_engine_from_settings(url=database_url)
    factory = make_session_factory(engine)
    db = factory()
    try:
        init_db(engine, db)
        db.expunge_all()
        yield SampleDataStore(db)
    finally:
        db.close()
        engine.dispose()
