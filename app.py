"""
App assembly entry point.

Re-exports the FastAPI `app` from `samples.api.main` so ASGI servers can be
pointed at `app:app`.
"""

from samples.api.main import app  # noqa: F401
