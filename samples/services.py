"""Product service used to illustrate testing against store doubles."""
import logging
from typing import List, Optional

from datastore import DataStore, ReadStore
from samples.db import models

logger = logging.getLogger(__name__)


class ProductService:
    def __init__(self, read_store: Optional[ReadStore] = None, data_store: Optional[DataStore] = None):
        self._read_store = read_store
        self._data_store = data_store

    @classmethod
    def for_reads(cls, read_store: ReadStore) -> "ProductService":
        return cls(read_store=read_store)

    @classmethod
    def for_writes(cls, data_store: DataStore) -> "ProductService":
        return cls(data_store=data_store)

    def get_active_products(self) -> List[models.Product]:
        if self._read_store is None:
            raise RuntimeError("ProductService has no read store configured")
        return self._read_store.list_all(
            models.Product,
            lambda q: q.filter(models.Product.is_active.is_(True)).order_by(models.Product.name),
        )

    def create_product(self, product: models.Product) -> int:
        if self._data_store is None:
            raise RuntimeError("ProductService has no data store configured")
        written = self._data_store.add(product).save()
        logger.info("created product %s", product.name)
        return written
