"""
Order processing on top of a ``DataStore``.

Each entry point runs its steps inside ``in_transaction`` so that stock
changes, orders and order items are written together or not at all.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from datastore import DataStore
from samples.db import models, schemas

logger = logging.getLogger(__name__)


class OrderProcessingError(Exception):
    """Raised when an order cannot be fulfilled; aborts the transaction."""


def new_order_number(prefix: str = "ORD") -> str:
    return f"{prefix}-{datetime.now(timezone.utc):%Y%m%d%H%M%S%f}"


def place_order(
    store: DataStore,
    customer_id: int,
    lines: Sequence[Tuple[int, int]],
    order_number: Optional[str] = None,
) -> schemas.OrderResult:
    """Create an order for ``(product_id, quantity)`` lines and ship it.

    Stock is checked and decremented per line; any missing product or
    shortfall raises ``OrderProcessingError`` and nothing is persisted.
    """
    if not lines:
        raise OrderProcessingError("An order needs at least one line")

    def work(tx: DataStore) -> schemas.OrderResult:
        order = models.Order(
            order_number=order_number or new_order_number(),
            customer_id=customer_id,
            status=models.OrderStatus.PROCESSING,
            total_amount=Decimal("0"),
        )
        tx.add(order).save()

        items = []
        total = Decimal("0")
        for product_id, quantity in lines:
            product = tx.query_tracked(models.Product).filter(models.Product.id == product_id).first()
            if product is None:
                raise OrderProcessingError(f"Product {product_id} not found")
            if product.stock < quantity:
                raise OrderProcessingError(f"Insufficient stock for product {product.name}")
            item = models.OrderItem(
                order_id=order.id,
                product_id=product_id,
                quantity=quantity,
                unit_price=product.price,
            )
            items.append(item)
            total += item.total_price
            product.stock -= quantity
            tx.update(product).save()

        tx.add_all(items).save()

        order.total_amount = total
        order.status = models.OrderStatus.SHIPPED
        tx.update(order).save()
        return schemas.OrderResult(order_id=order.id, success=True)

    result = store.in_transaction(work)
    logger.info("order %s placed", result.order_id)
    return result


def reserve_and_fail(store: DataStore, product_id: int, quantity: int, customer_id: int = 1) -> None:
    """Reserve stock and create an order, then fail the payment step.

    Always raises ``OrderProcessingError``; the reservation and the order are
    rolled back with the transaction.
    """

    def work(tx: DataStore) -> None:
        tx.execute_update(
            models.Product,
            models.Product.id == product_id,
            lambda b: b.set(models.Product.stock, models.Product.stock - quantity),
        )
        order = models.Order(
            order_number=new_order_number("COMP"),
            customer_id=customer_id,
            total_amount=Decimal("100.00"),
            status=models.OrderStatus.PROCESSING,
        )
        tx.add(order).save()
        logger.info("reserved %d unit(s) of product %d for order %s", quantity, product_id, order.order_number)
        raise OrderProcessingError("Payment processing failed")

    store.in_transaction(work)


def create_pending_order(store: DataStore, customer_id: int, amount: Decimal) -> schemas.OrderResult:
    """Create a pending order; joins the caller's transaction when one is open."""

    def work(tx: DataStore) -> schemas.OrderResult:
        order = models.Order(
            order_number=new_order_number("NESTED"),
            customer_id=customer_id,
            total_amount=amount,
            status=models.OrderStatus.PENDING,
        )
        tx.add(order).save()
        return schemas.OrderResult(order_id=order.id, success=True)

    return store.in_transaction(work)


def update_customer_and_order(
    store: DataStore,
    customer_id: int,
    phone: str,
    amount: Decimal = Decimal("50.00"),
) -> Tuple[bool, schemas.OrderResult]:
    """Update a customer's phone and create an order in one transaction."""

    def work(tx: DataStore) -> Tuple[bool, schemas.OrderResult]:
        customer = tx.query_tracked(models.Customer).filter(models.Customer.id == customer_id).first()
        updated = False
        if customer is not None:
            customer.phone = phone
            tx.update(customer).save()
            updated = True
        return updated, create_pending_order(tx, customer_id, amount)

    return store.in_transaction(work)
