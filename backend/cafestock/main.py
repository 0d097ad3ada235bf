import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cafestock.api import (
    auth,
    deliveries,
    inventory,
    inventory_requests,
    notifications,
    outlets,
    purchase_orders,
    request_builder,
    vendors,
)
from cafestock.core.app_context import AppContextRegistry
from cafestock.core.config import settings
from cafestock.core.errors import PartialBatchFailure, WorkflowError
from cafestock.core.logging_config import setup_logging
from cafestock.db.base import engine

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    app.state.contexts = AppContextRegistry()
    logger.info("%s started", settings.PROJECT_NAME)
    yield
    app.state.contexts.close_all()
    await engine.dispose()


app = FastAPI(
    title="CafeStock API",
    description="Café inventory replenishment: requests, purchase orders, deliveries",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS - restrict in production via env
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    content = {"title": exc.title, "detail": exc.message}
    if isinstance(exc, PartialBatchFailure):
        content["persisted_ids"] = [str(i) for i in exc.persisted_ids]
        content["failed_item_id"] = str(exc.failed_item_id)
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=content)


# Routers
app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(inventory.router, prefix=API_PREFIX)
app.include_router(request_builder.router, prefix=API_PREFIX)
app.include_router(inventory_requests.router, prefix=API_PREFIX)
app.include_router(purchase_orders.router, prefix=API_PREFIX)
app.include_router(deliveries.router, prefix=API_PREFIX)
app.include_router(vendors.router, prefix=API_PREFIX)
app.include_router(outlets.router, prefix=API_PREFIX)
app.include_router(notifications.router, prefix=API_PREFIX)


@app.get("/health")
async def health_check():
    return {"status": "ok", "version": "0.1.0"}
