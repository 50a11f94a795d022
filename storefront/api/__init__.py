# storefront/api/__init__.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from kombu.exceptions import OperationalError as KombuOperationalError
from redis.exceptions import RedisError
from starlette.concurrency import run_in_threadpool

from storefront.api.routers import health, products, carts, checkout, orders
from storefront.data.database import init_db
from storefront.utils.settings import CATALOG_SYNC_MODE
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def start_catalog_sync(mode: str = CATALOG_SYNC_MODE):
    #imported here so the API module does not pull in celery at import time
    from storefront.tasks.catalog_sync import sync_catalog_task

    if mode == "celery":
        logger.info("Dispatching catalog sync to celery")
        try:
            sync_catalog_task.delay()
        except (KombuOperationalError, RedisError) as e:
            #broker down must not keep the API from starting
            logger.error(f"Error dispatching catalog sync, catalog may be incomplete: {e}")
    elif mode == "inline":
        # calling the task directly runs it in this process
        sync_catalog_task()
    else:
        logger.info("Catalog sync on startup disabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database tables ready")
    await run_in_threadpool(start_catalog_sync)
    yield


def create_app(with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title="Storefront Service",
        version="1.0.0",
        lifespan=lifespan if with_lifespan else None,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)
    app.include_router(orders.router)

    return app
