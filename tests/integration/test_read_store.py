from decimal import Decimal

import pytest
from sqlalchemy.orm import joinedload

from datastore import DataStoreError
from samples.db import models


def test_query_returns_untracked_instances(store, db_session):
    products = store.query(models.Product).order_by(models.Product.id).all()
    assert [p.name for p in products] == ["Laptop", "Smartphone", "Programming Book", "T-Shirt"]
    assert all(p not in db_session for p in products)
    assert len(db_session.identity_map) == 0


def test_changes_to_untracked_instances_are_not_saved(store, other_session):
    laptop = store.query(models.Product).filter(models.Product.id == 1).one()
    laptop.stock = 999

    assert store.save_changes() == 0
    stock = other_session.query(models.Product.stock).filter(models.Product.id == 1).scalar()
    assert stock == 50


def test_query_is_composable(store):
    q = store.query(models.Product).filter(models.Product.price > 500)
    assert q.count() == 2
    names = [p.name for p in q.order_by(models.Product.price.desc())]
    assert names == ["Laptop", "Smartphone"]


def test_eager_loaded_relations_are_detached_too(store, db_session):
    product = (
        store.query(models.Product)
        .options(joinedload(models.Product.category))
        .filter(models.Product.id == 3)
        .one()
    )
    assert product.category.name == "Books"
    assert product not in db_session
    assert product.category not in db_session


def test_read_of_tracked_row_returns_separate_copy(store, db_session, other_session):
    tracked = store.query_tracked(models.Product).filter(models.Product.id == 1).one()
    read = store.query(models.Product).filter(models.Product.id == 1).one()
    assert read is not tracked
    assert read not in db_session
    assert tracked in db_session

    read.stock = 12345
    assert store.save_changes() == 0
    assert other_session.query(models.Product.stock).filter(models.Product.id == 1).scalar() == 50


def test_read_does_not_pick_up_unflushed_edits_of_tracked_rows(store):
    tracked = store.query_tracked(models.Product).filter(models.Product.id == 2).one()
    tracked.stock = 1
    read = store.query(models.Product).filter(models.Product.id == 2).one()
    assert read.stock == 100
    assert tracked.stock == 1


def test_read_leaves_identity_map_untouched(store, db_session):
    tracked = store.query_tracked(models.Product).all()
    keys_before = set(db_session.identity_map.keys())
    read = store.list_all(models.Product)
    assert set(db_session.identity_map.keys()) == keys_before
    assert {id(p) for p in read}.isdisjoint(id(p) for p in tracked)


def test_read_sees_flushed_rows_of_open_transaction(store):
    def work(tx):
        tx.add(models.Category(name="Garden")).save()
        return [c.name for c in tx.query(models.Category).order_by(models.Category.id)]

    assert store.in_transaction(work)[-1] == "Garden"


def test_pending_instances_invisible_until_saved(store):
    store.add(models.Product(name="Desk Lamp", price=Decimal("15.00"), stock=5, category_id=1))
    assert store.query(models.Product).filter(models.Product.name == "Desk Lamp").count() == 0
    store.save_changes()
    assert store.query(models.Product).filter(models.Product.name == "Desk Lamp").count() == 1


def test_query_as_projects_columns(store, db_session):
    rows = (
        store.query_as(models.Product, models.Product.name, models.Product.price)
        .filter(models.Product.category_id == 1)
        .order_by(models.Product.id)
        .all()
    )
    assert [(r.name, r.price) for r in rows] == [
        ("Laptop", Decimal("1299.99")),
        ("Smartphone", Decimal("699.99")),
    ]
    assert len(db_session.identity_map) == 0


def test_query_as_requires_columns(store):
    with pytest.raises(DataStoreError):
        store.query_as(models.Product)


def test_list_all_without_shape(store):
    assert len(store.list_all(models.Category)) == 3


def test_list_all_with_shape(store):
    active = store.list_all(
        models.Product,
        lambda q: q.filter(models.Product.is_active.is_(True)).order_by(models.Product.name),
    )
    assert [p.name for p in active] == ["Laptop", "Programming Book", "Smartphone", "T-Shirt"]


def test_list_projected_can_change_selected_entities(store):
    rows = store.list_projected(
        models.Product,
        lambda q: q.join(models.Product.category)
        .filter(models.Category.name == "Electronics")
        .with_entities(models.Product.name, models.Category.name.label("category_name"))
        .order_by(models.Product.name),
    )
    assert [dict(r._mapping) for r in rows] == [
        {"name": "Laptop", "category_name": "Electronics"},
        {"name": "Smartphone", "category_name": "Electronics"},
    ]


def test_store_is_usable_as_read_store(store):
    from datastore import ReadStore

    assert isinstance(store, ReadStore)
