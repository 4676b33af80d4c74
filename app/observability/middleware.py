from __future__ import annotations

import uuid
from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import Headers, MutableHeaders

from app.observability.metrics import get_metrics

_MAX_REQUEST_ID_LEN = 128


def _incoming_request_id(scope: dict[str, Any]) -> str | None:
    value = Headers(scope=scope).get("x-request-id", "").strip()
    if not value or len(value) > _MAX_REQUEST_ID_LEN or not value.isprintable():
        return None
    return value


class RequestContextMiddleware:
    """Binds a request id for logs, echoes it as ``X-Request-ID``, records metrics.

    A well-formed ``X-Request-ID`` sent by the caller is reused so log lines can
    be joined across services; otherwise a fresh UUID is minted.
    """

    def __init__(self, app: Callable[..., Any]) -> None:
        self.app = app
        # Avoid self-observing the observability endpoint.
        self._excluded_metric_paths = {"/metrics"}

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = _incoming_request_id(scope) or str(uuid.uuid4())
        path = scope.get("path")

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=path,
            method=scope.get("method"),
        )

        start = perf_counter()
        status_code: int = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code

            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                MutableHeaders(scope=message)["X-Request-ID"] = request_id

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (perf_counter() - start) * 1000.0

            if path not in self._excluded_metric_paths:
                get_metrics().observe_http_request(elapsed_ms=elapsed_ms, status_code=status_code)

            log = structlog.get_logger("access")
            emit = log.warning if status_code >= 500 else log.info
            emit("http_request", status_code=status_code, elapsed_ms=round(elapsed_ms, 2))

            structlog.contextvars.clear_contextvars()
