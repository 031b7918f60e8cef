"""
FastAPI app assembly for the sample products API.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from datastore.config import get_settings

# Configure logging
LOG_LEVEL_NAME = get_settings().log_level
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)

from samples.api.products import router as products_router
from samples.database import SessionLocal, engine
from samples.db.seed import init_db


@asynccontextmanager
async def lifespan(_app: FastAPI):
    db = SessionLocal()
    try:
        init_db(engine, db)
    finally:
        db.close()
    logger.info("app_startup: log_level=%s database=%s", LOG_LEVEL_NAME, engine.url.render_as_string(hide_password=True))
    yield


app = FastAPI(
    title="Sample Products API",
    description="Catalog endpoints backed by the datastore read/write stores.",
    version="1.0.0",
    lifespan=lifespan,
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False

app.include_router(products_router)


@app.get("/health")
def health():
    return {"status": "ok"}
