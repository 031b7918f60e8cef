"""Data store for the sample application."""
from datastore import DataStoreBase


class SampleDataStore(DataStoreBase):
    """Store bound to a session created from ``samples.database.SessionLocal``."""
