"""
Seed data for the sample catalog.

Inserts a fixed set of categories, products and customers into an empty
database. Running it against a populated catalog is a no-op.
"""
import logging
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.orm import Session

from samples.db import models

logger = logging.getLogger(__name__)


def _seed_rows():
    categories = [
        models.Category(id=1, name="Electronics", description="Electronic devices and accessories"),
        models.Category(id=2, name="Books", description="Books and publications"),
        models.Category(id=3, name="Clothing", description="Clothing and accessories"),
    ]
    products = [
        models.Product(id=1, name="Laptop", description="High-performance laptop", price=Decimal("1299.99"), stock=50, category_id=1),
        models.Product(id=2, name="Smartphone", description="Latest smartphone model", price=Decimal("699.99"), stock=100, category_id=1),
        models.Product(id=3, name="Programming Book", description="Learn Python programming", price=Decimal("49.99"), stock=25, category_id=2),
        models.Product(id=4, name="T-Shirt", description="Cotton t-shirt", price=Decimal("19.99"), stock=200, category_id=3),
    ]
    customers = [
        models.Customer(id=1, first_name="John", last_name="Doe", email="john.doe@example.com"),
        models.Customer(id=2, first_name="Jane", last_name="Smith", email="jane.smith@example.com"),
    ]
    return categories, products, customers


def _advance_sequences(db: Session) -> None:
    # explicit ids do not move serial sequences on Postgres
    for table in ("categories", "products", "customers"):
        db.execute(
            text(f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), (SELECT MAX(id) FROM {table}))")
        )


def seed_sample_data(db: Session) -> bool:
    """Insert the sample catalog; return False when data already exists."""
    if db.query(models.Category).count():
        logger.debug("seed skipped: catalog already populated")
        return False
    categories, products, customers = _seed_rows()
    db.add_all(categories)
    db.flush()
    db.add_all(products + customers)
    db.flush()
    if db.get_bind().dialect.name == "postgresql":
        _advance_sequences(db)
    db.commit()
    logger.info(
        "seeded %d categories, %d products, %d customers",
        len(categories), len(products), len(customers),
    )
    return True


def init_db(engine, db: Session) -> None:
    """Create the schema if needed and seed it."""
    models.Base.metadata.create_all(bind=engine)
    seed_sample_data(db)
