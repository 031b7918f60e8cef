"""
Rough timings for common store operations.

Compares tracked and untracked reads, and per-entity updates against a
single set-based update. Run with ``python -m samples.performance_demo``.
"""
import argparse
import logging
import time
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from datastore import DataStore
from samples.bootstrap import DEMO_DATABASE_URL, configure_logging, demo_store
from samples.db import models

logger = logging.getLogger("samples.performance_demo")


def _timed(label: str, fn: Callable[[], object], repeat: int) -> float:
    best = float("inf")
    for _ in range(repeat):
        start = time.perf_counter()
        fn()
        best = min(best, time.perf_counter() - start)
    logger.info("%-32s %8.2f ms", label, best * 1000)
    return best


def populate(store: DataStore, rows: int) -> None:
    products = [
        models.Product(
            name=f"Bench product {i}",
            description="generated",
            price=Decimal("9.99"),
            stock=i % 100,
            category_id=1 + i % 3,
        )
        for i in range(rows)
    ]
    store.add_all(products).save()


def run(database_url: str = DEMO_DATABASE_URL, rows: int = 1000, repeat: int = 3) -> Dict[str, float]:
    with demo_store(database_url) as store:
        populate(store, rows)
        session = store.session
        session.expunge_all()
        timings = {}

        def untracked_read():
            store.list_all(models.Product)

        def tracked_read():
            store.query_tracked(models.Product).all()
            session.expunge_all()

        def projected_read():
            store.query_as(models.Product, models.Product.id, models.Product.name).all()

        def per_entity_update():
            for product in store.query_tracked(models.Product).filter(models.Product.stock < 10):
                product.stock += 1
                store.update(product)
            store.save_changes()
            session.expunge_all()

        def set_based_update():
            store.execute_update(
                models.Product,
                models.Product.stock < 10,
                lambda b: b.set(models.Product.stock, models.Product.stock + 1),
            )

        timings["untracked_read"] = _timed("untracked read", untracked_read, repeat)
        timings["tracked_read"] = _timed("tracked read", tracked_read, repeat)
        timings["projected_read"] = _timed("projected read", projected_read, repeat)
        timings["per_entity_update"] = _timed("per-entity update", per_entity_update, repeat)
        timings["set_based_update"] = _timed("set-based update", set_based_update, repeat)
        return timings


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Time common data store operations.")
    parser.add_argument("--database-url", default=DEMO_DATABASE_URL)
    parser.add_argument("--rows", type=int, default=1000)
    parser.add_argument("--repeat", type=int, default=3)
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    run(args.database_url, rows=args.rows, repeat=args.repeat)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
