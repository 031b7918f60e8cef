"""
Products API endpoints.

Reads go through the read store (untracked, projected where possible);
writes use tracked entities and save handles, and the discontinue/stock
endpoints use set-based updates.
"""
import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from sqlalchemy import and_
from sqlalchemy.orm import joinedload

from datastore import DataStore, ReadStore
from samples.api.deps import get_data_store, get_read_store
from samples.db import models, schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=List[schemas.ProductSummary])
def list_products_endpoint(
    active_only: Optional[bool] = None,
    category_id: Optional[int] = None,
    read_store: ReadStore = Depends(get_read_store),
):
    def shape(q):
        if active_only:
            q = q.filter(models.Product.is_active.is_(True))
        if category_id is not None:
            q = q.filter(models.Product.category_id == category_id)
        return (
            q.join(models.Product.category)
            .with_entities(
                models.Product.id,
                models.Product.name,
                models.Product.price,
                models.Category.name.label("category_name"),
                models.Product.stock,
            )
            .order_by(models.Product.id)
        )

    rows = read_store.list_projected(models.Product, shape)
    return [schemas.ProductSummary.model_validate(dict(row._mapping)) for row in rows]


@router.get("/{product_id}", response_model=schemas.Product)
def get_product_endpoint(product_id: int, read_store: ReadStore = Depends(get_read_store)):
    product = (
        read_store.query(models.Product)
        .options(joinedload(models.Product.category))
        .filter(models.Product.id == product_id)
        .first()
    )
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("/", response_model=schemas.Product, status_code=status.HTTP_201_CREATED)
def create_product_endpoint(
    payload: schemas.ProductCreate,
    store: DataStore = Depends(get_data_store),
):
    product = models.Product(**payload.model_dump())
    store.add(product).save()
    logger.info("Created product %s: %s", product.id, product.name)
    return product


@router.put("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_product_endpoint(
    product_id: int,
    payload: schemas.ProductUpdate,
    store: DataStore = Depends(get_data_store),
):
    if payload.id != product_id:
        raise HTTPException(status_code=400, detail="Product id in path and body must match")
    existing = store.query_tracked(models.Product).filter(models.Product.id == product_id).first()
    if existing is None:
        raise HTTPException(status_code=404, detail="Product not found")
    for key, value in payload.model_dump(exclude={"id"}).items():
        setattr(existing, key, value)
    existing.updated_at = models.now_utc()
    store.update(existing).save()
    logger.info("Updated product %s: %s", product_id, payload.name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product_endpoint(product_id: int, store: DataStore = Depends(get_data_store)):
    product = store.query_tracked(models.Product).filter(models.Product.id == product_id).first()
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    store.remove(product).save()
    logger.info("Deleted product %s", product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{product_id}/discontinue", status_code=status.HTTP_204_NO_CONTENT)
def discontinue_product_endpoint(product_id: int, store: DataStore = Depends(get_data_store)):
    affected = store.execute_update(
        models.Product,
        and_(models.Product.id == product_id, models.Product.is_discontinued.is_(False)),
        lambda b: b.set_const(models.Product.is_discontinued, True),
    )
    if affected == 0:
        raise HTTPException(status_code=404, detail="Product not found or already discontinued")
    logger.info("Discontinued product %s", product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/bulk-update-stock", status_code=status.HTTP_204_NO_CONTENT)
def bulk_update_stock_endpoint(
    stock_updates: Dict[int, int] = Body(...),
    store: DataStore = Depends(get_data_store),
):
    if any(value < 0 for value in stock_updates.values()):
        raise HTTPException(status_code=422, detail="Stock levels must not be negative")

    def work(tx: DataStore) -> int:
        affected = 0
        for product_id, stock in stock_updates.items():
            affected += tx.execute_update(
                models.Product,
                models.Product.id == product_id,
                lambda b, stock=stock: b.set_const(models.Product.stock, stock),
            )
        return affected

    affected = store.in_transaction(work)
    logger.info("Bulk updated stock for %d product(s), %d row(s) changed", len(stock_updates), affected)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
