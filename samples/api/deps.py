"""
API dependency helpers.

One ``SampleDataStore`` per request, bound to the request's session. The
read store dependency resolves to the same object.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from datastore import DataStore, ReadStore
from samples.database import get_db
from samples.store import SampleDataStore


def get_data_store(db: Session = Depends(get_db)) -> DataStore:
    return SampleDataStore(db)


def get_read_store(store: DataStore = Depends(get_data_store)) -> ReadStore:
    return store
