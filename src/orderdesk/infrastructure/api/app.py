"""HTTP entry point.

Usage:
    orderdesk serve --port 8000
    uvicorn orderdesk.infrastructure.api.app:create_app --factory
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request

from orderdesk.config import Settings
from orderdesk.infrastructure.api.errors import register_exception_handlers
from orderdesk.infrastructure.api.routes import order_router, product_router
from orderdesk.infrastructure.bootstrap import Services, build_services, sql_store
from orderdesk.infrastructure.logging_config import configure_logging


def create_app(services: Services | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the application.

    When ``services`` is given (tests, embedding) the caller owns the
    store; otherwise one is built from ``settings`` and disposed on
    shutdown.
    """
    owned_store = None
    if services is None:
        settings = settings or Settings.from_env()
        configure_logging(settings.log_level, settings.log_json)
        owned_store = sql_store(settings)
        services = build_services(owned_store, settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owned_store is not None:
            owned_store.dispose()

    app = FastAPI(
        title="orderdesk",
        description="Order placement with transactional inventory control",
        lifespan=lifespan,
    )
    app.state.services = services

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next):
        """Tag every log line emitted while serving a request."""
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request.headers.get("x-request-id") or uuid.uuid4().hex,
            method=request.method,
            path=request.url.path,
        )
        return await call_next(request)

    register_exception_handlers(app)
    app.include_router(order_router)
    app.include_router(product_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
