from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _make_alembic_config(database_url: str) -> Config:
    """Return an Alembic config pointing at the project migrations."""
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    return cfg


def test_alembic_upgrade_and_downgrade_cycle(tmp_path, monkeypatch):
    database_url = f"sqlite+pysqlite:///{tmp_path / 'migrations.db'}"
    monkeypatch.setenv("TEST_DATABASE_URL", database_url)
    cfg = _make_alembic_config(database_url)

    command.upgrade(cfg, "head")
    engine = create_engine(database_url)
    try:
        tables = set(inspect(engine).get_table_names())
        assert {"categories", "products", "customers", "orders", "order_items"} <= tables
        indexes = {ix["name"] for ix in inspect(engine).get_indexes("products")}
        assert "idx_products_category_id" in indexes

        command.downgrade(cfg, "base")
        assert set(inspect(engine).get_table_names()) <= {"alembic_version"}

        command.upgrade(cfg, "head")
    finally:
        engine.dispose()


def test_migrated_schema_accepts_seed_data(tmp_path, monkeypatch):
    from sqlalchemy.orm import sessionmaker

    from samples.db.seed import seed_sample_data

    database_url = f"sqlite+pysqlite:///{tmp_path / 'seeded.db'}"
    monkeypatch.setenv("TEST_DATABASE_URL", database_url)
    command.upgrade(_make_alembic_config(database_url), "head")

    engine = create_engine(database_url)
    db = sessionmaker(bind=engine)()
    try:
        assert seed_sample_data(db) is True
        assert seed_sample_data(db) is False
    finally:
        db.close()
        engine.dispose()
