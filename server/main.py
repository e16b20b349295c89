import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import api_router
from .core.config import get_settings
from .core.logging import configure_logging
from .db.session import async_engine, create_tables
from .features.shared.errors import register_error_handlers

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    if settings.db_create_tables:
        logger.info("Creating database tables.")
        await create_tables()
    logger.info("BSGold API starting (environment=%s).", settings.environment)
    try:
        yield
    finally:
        await async_engine.dispose()


app = FastAPI(title="BSGold Orders API", docs_url="/api/docs", lifespan=lifespan)
app.include_router(api_router)
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def read_root() -> dict:
    return {"status": "ok", "service": "bsgold-orders"}


@app.get("/health")
async def health_check() -> dict:
    return {"healthy": True}
