from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.error_handlers import register_error_handlers
from app.api.metrics import router as metrics_router
from app.api.users import router as users_router
from app.config import get_settings
from app.observability.logging import configure_logging
from app.observability.middleware import RequestContextMiddleware
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)


def create_app(store: UserStore | None = None) -> FastAPI:
    """Build the ASGI app.

    An injected store is used as is and left open for its owner. Without one,
    the lifespan opens a store from ``DATABASE_URL`` and disposes it on shutdown.
    """

    settings = get_settings()
    configure_logging(settings.log_level_value)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned: UserStore | None = None
        if app.state.store is None:
            owned = UserStore.from_url(get_settings().database_url)
            app.state.store = owned
        app.state.store.init_schema()
        logger.info("service.started")
        try:
            yield
        finally:
            if owned is not None:
                owned.close()
                app.state.store = None
            logger.info("service.stopped")

    app = FastAPI(title="CRUD Service", version="0.1.0", lifespan=lifespan)
    app.state.store = store
    app.add_middleware(RequestContextMiddleware)
    app.include_router(users_router)
    app.include_router(metrics_router)
    register_error_handlers(app)

    @app.get("/health")
    def health(request: Request) -> JSONResponse:
        current: UserStore | None = request.app.state.store
        if current is None or not current.ping():
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return JSONResponse(status_code=200, content={"status": "ok"})

    return app


app = create_app()
