"""
Transaction scenarios: multi-step order processing, a rolled-back
reservation and nested units of work sharing one transaction.

Run with ``python -m samples.transaction_scenarios [--database-url URL]``.
"""
import argparse
import logging
from typing import List, Optional

from datastore import DataStore
from samples.bootstrap import DEMO_DATABASE_URL, configure_logging, demo_store
from samples.db import models
from samples.orders import OrderProcessingError, place_order, reserve_and_fail, update_customer_and_order

logger = logging.getLogger("samples.transaction_scenarios")


def complex_order_processing(store: DataStore) -> Optional[int]:
    logger.info("--- Complex order processing transaction ---")
    customer = models.Customer(first_name="Transaction", last_name="Customer", email="transaction@example.com")

    def create_customer(tx: DataStore) -> int:
        tx.add(customer).save()
        return customer.id

    customer_id = store.in_transaction(create_customer)
    try:
        result = place_order(store, customer_id, [(1, 2), (2, 1), (3, 3)])
    except OrderProcessingError:
        logger.exception("Complex order processing failed")
        return None
    logger.info("Complex order processed successfully: Order %s", result.order_id)
    return result.order_id


def compensating_transaction(store: DataStore) -> int:
    logger.info("--- Compensating transaction ---")
    try:
        reserve_and_fail(store, product_id=1, quantity=10)
    except OrderProcessingError as exc:
        logger.warning("Transaction rolled back due to: %s", exc)
    stock = store.query_as(models.Product, models.Product.stock).filter(models.Product.id == 1).scalar()
    logger.info("Product 1 stock after rollback: %s", stock)
    return stock


def nested_transaction(store: DataStore) -> bool:
    logger.info("--- Nested transaction ---")
    customer_updated, order_result = update_customer_and_order(store, customer_id=1, phone="+1-555-0123")
    logger.info(
        "Nested transaction completed: customer updated = %s, order success = %s",
        customer_updated,
        order_result.success,
    )
    return customer_updated and order_result.success


def run(database_url: str = DEMO_DATABASE_URL) -> dict:
    with demo_store(database_url) as store:
        logger.info("=== Transaction scenario examples ===")
        results = {
            "order_id": complex_order_processing(store),
            "stock_after_rollback": compensating_transaction(store),
            "nested_ok": nested_transaction(store),
        }
        logger.info("=== Transaction examples completed! ===")
        return results


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Transaction scenarios over the sample data store.")
    parser.add_argument("--database-url", default=DEMO_DATABASE_URL)
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    run(args.database_url)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
