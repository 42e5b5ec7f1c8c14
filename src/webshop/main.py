import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from tortoise import Tortoise
from tortoise.contrib.fastapi import tortoise_exception_handlers

from .core.config import TORTOISE_ORM_CONFIG
from .core.logging_config import configure_logging
from .features.auth.router import router as auth_router
from .features.inventory.router import router as inventory_router
from .features.orders.router import router as orders_router
from .features.reports.periods import ReportPeriod
from .features.reports.router import router as reports_router

API_PREFIX = "/api/v1"

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Opens the Tortoise connections for the lifetime of the app."""
    await Tortoise.init(config=TORTOISE_ORM_CONFIG)
    logger.info(f"Database connected, serving {app.title} under {API_PREFIX}")

    yield

    await Tortoise.close_connections()
    logger.info("Database connections closed")


app = FastAPI(
    title="Webshop API",
    description="Catalog, orders and period business reports for the webshop admin.",
    version="0.1.0",
    exception_handlers=tortoise_exception_handlers(),
    lifespan=lifespan,
)

for feature_router in (auth_router, inventory_router, orders_router, reports_router):
    app.include_router(feature_router, prefix=API_PREFIX)


@app.get("/")
async def read_root(request: Request):
    client_host = request.client.host if request.client else "unknown client"
    logger.debug(f"Root endpoint accessed by {client_host}")
    return {
        "name": app.title,
        "reports": f"{API_PREFIX}/reports",
        "periods": [period.value for period in ReportPeriod],
    }
