"""
Walk through reads, writes, set-based updates and a transaction.

Run with ``python -m samples.basic_usage [--database-url URL]``.
"""
import argparse
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func

from datastore import DataStore, ReadStore
from samples.bootstrap import DEMO_DATABASE_URL, configure_logging, demo_store
from samples.db import models
from samples.orders import new_order_number

logger = logging.getLogger("samples.basic_usage")


def run_read_examples(read_store: ReadStore) -> dict:
    logger.info("--- Read examples ---")
    active = read_store.list_all(
        models.Product,
        lambda q: q.filter(models.Product.is_active.is_(True)).order_by(models.Product.name),
    )
    logger.info("Found %d active products:", len(active))
    for product in active:
        logger.info("  - %s: $%s", product.name, product.price)

    summaries = read_store.list_projected(
        models.Product,
        lambda q: q.filter(models.Product.is_active.is_(True))
        .join(models.Product.category)
        .with_entities(models.Product.name, models.Product.price, models.Category.name.label("category_name")),
    )
    logger.info("Product summaries (%d items):", len(summaries))
    for row in summaries:
        logger.info("  - %s", dict(row._mapping))

    expensive = read_store.query(models.Product).filter(models.Product.price > 500).count()
    logger.info("Expensive products (>$500): %d", expensive)

    names = [name for (name,) in read_store.query_as(models.Category, models.Category.name).order_by(models.Category.name)]
    return {"active": len(active), "summaries": len(summaries), "expensive": expensive, "categories": names}


def run_write_examples(store: DataStore) -> models.Product:
    logger.info("--- Write examples ---")
    product = models.Product(
        name="Wireless Mouse",
        description="Ergonomic wireless mouse",
        price=Decimal("29.99"),
        stock=75,
        category_id=1,
    )
    store.add(product).save()
    logger.info("Added product: %s (ID: %s)", product.name, product.id)

    product.price = Decimal("24.99")
    store.update(product).save()
    logger.info("Updated product price to: $%s", product.price)

    categories: List[models.Category] = [
        models.Category(name="Sports", description="Sports equipment and gear"),
        models.Category(name="Home & Garden", description="Home and garden supplies"),
    ]
    store.add_all(categories).save()
    logger.info("Added %d new categories", len(categories))
    return product


def run_bulk_operation_examples(store: DataStore) -> int:
    logger.info("--- Bulk operation examples ---")
    updated = store.execute_update(
        models.Product,
        models.Product.category_id == 1,
        lambda b: b.set_const(models.Product.is_active, True),
    )
    logger.info("Bulk updated %d electronics products", updated)

    restocked = store.execute_update(
        models.Product,
        models.Product.stock < 10,
        lambda b: b.set(models.Product.stock, models.Product.stock + 50),
    )
    logger.info("Restocked %d low-inventory products", restocked)
    return updated


def run_transaction_example(store: DataStore) -> dict:
    logger.info("--- Transaction example ---")

    def work(tx: DataStore) -> dict:
        order = models.Order(order_number=new_order_number(), customer_id=1, total_amount=Decimal("0"))
        tx.add(order).save()

        items = [
            models.OrderItem(order_id=order.id, product_id=1, quantity=1, unit_price=Decimal("1299.99")),
            models.OrderItem(order_id=order.id, product_id=3, quantity=2, unit_price=Decimal("49.99")),
        ]
        tx.add_all(items).save()

        order.total_amount = sum((item.total_price for item in items), Decimal("0"))
        tx.update(order).save()

        for product_id, quantity in ((1, 1), (3, 2)):
            tx.execute_update(
                models.Product,
                models.Product.id == product_id,
                lambda b, quantity=quantity: b.set(models.Product.stock, models.Product.stock - quantity),
            )
        return {"order_id": order.id, "total": order.total_amount}

    result = store.in_transaction(work)
    logger.info("Transaction completed - Order %s, Total: $%s", result["order_id"], result["total"])
    return result


def run(database_url: str = DEMO_DATABASE_URL) -> dict:
    with demo_store(database_url) as store:
        logger.info("=== Data store basic usage examples ===")
        reads = run_read_examples(store)
        product = run_write_examples(store)
        run_bulk_operation_examples(store)
        order = run_transaction_example(store)
        total_products = store.query(models.Product).with_entities(func.count(models.Product.id)).scalar()
        logger.info("=== Examples completed successfully! ===")
        return {"reads": reads, "new_product_id": product.id, "order": order, "products": total_products}


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--database-url", default=DEMO_DATABASE_URL)
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    run(args.database_url)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
