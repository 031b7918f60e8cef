import pytest


@pytest.fixture(autouse=True)
def _no_database_env(monkeypatch):
    """Unit tests read configuration from a clean environment."""
    for var in ("DATASTORE_ECHO_SQL", "DATASTORE_MAX_RETRIES", "DATASTORE_RETRY_DELAY", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    yield
