from decimal import Decimal

import pytest

from samples import orders
from samples.db import models


def _stock(session, product_id):
    return session.query(models.Product.stock).filter(models.Product.id == product_id).scalar()


def test_place_order_ships_and_decrements_stock(store, other_session):
    result = orders.place_order(store, customer_id=1, lines=[(1, 1), (3, 2)], order_number="ORD-TEST-1")

    assert result.success is True
    order = other_session.get(models.Order, result.order_id)
    assert order.order_number == "ORD-TEST-1"
    assert order.status == models.OrderStatus.SHIPPED
    assert order.total_amount == Decimal("1399.97")
    assert sorted((i.product_id, i.quantity) for i in order.items) == [(1, 1), (3, 2)]
    assert _stock(other_session, 1) == 49
    assert _stock(other_session, 3) == 23


def test_place_order_insufficient_stock_rolls_back(store, other_session):
    with pytest.raises(orders.OrderProcessingError, match="Insufficient stock for product Programming Book"):
        orders.place_order(store, customer_id=1, lines=[(1, 1), (3, 26)])

    assert other_session.query(models.Order).count() == 0
    assert other_session.query(models.OrderItem).count() == 0
    assert _stock(other_session, 1) == 50


def test_place_order_unknown_product(store, other_session):
    with pytest.raises(orders.OrderProcessingError, match="Product 42 not found"):
        orders.place_order(store, customer_id=1, lines=[(42, 1)])
    assert other_session.query(models.Order).count() == 0


def test_place_order_requires_lines(store):
    with pytest.raises(orders.OrderProcessingError):
        orders.place_order(store, customer_id=1, lines=[])


def test_failed_payment_releases_reservation(store, other_session):
    with pytest.raises(orders.OrderProcessingError, match="Payment processing failed"):
        orders.reserve_and_fail(store, product_id=1, quantity=2)

    assert _stock(other_session, 1) == 50
    assert other_session.query(models.Order).count() == 0


def test_update_customer_and_order_in_one_transaction(store, other_session):
    updated, result = orders.update_customer_and_order(store, customer_id=1, phone="555-1234")

    assert updated is True
    assert result.success is True
    assert other_session.get(models.Customer, 1).phone == "555-1234"
    order = other_session.get(models.Order, result.order_id)
    assert order.status == models.OrderStatus.PENDING
    assert order.order_number.startswith("NESTED-")
    assert order.total_amount == Decimal("50.00")


def test_update_customer_and_order_rolls_back_both(store, other_session, monkeypatch):
    def failing_order(tx, customer_id, amount):
        raise orders.OrderProcessingError("order rejected")

    monkeypatch.setattr(orders, "create_pending_order", failing_order)
    with pytest.raises(orders.OrderProcessingError):
        orders.update_customer_and_order(store, customer_id=1, phone="555-0000")

    assert other_session.get(models.Customer, 1).phone is None
    assert other_session.query(models.Order).count() == 0


def test_new_order_number_prefix():
    assert orders.new_order_number("COMP").startswith("COMP-")
    assert orders.new_order_number().startswith("ORD-")
