from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.services.errors import StoreUnavailableError


def _error_location(error: dict) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part != "body"]
    return ".".join(loc) or "body"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Malformed bodies are client errors like missing fields: 400, not FastAPI's 422.
        locations = sorted({_error_location(err) for err in exc.errors()})
        return JSONResponse(
            status_code=400,
            content={"detail": f"Invalid request body: {', '.join(locations)}"},
        )

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
        structlog.get_logger("store").error("store_unavailable", error=str(exc))
        return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})
