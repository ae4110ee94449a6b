"""FastAPI application factory."""

import os

from fastapi import FastAPI, Request, Response

from tangrat.observability.correlation import (
    CORRELATION_ID_HEADER,
    accept_correlation_id,
    correlation_scope,
)

from .routers import public
from .routes import dga


def _normalize_base_path(base_path: str) -> str:
    base_path = base_path.strip().rstrip("/")
    if base_path and not base_path.startswith("/"):
        base_path = "/" + base_path
    return base_path


def create_app(base_path: str | None = None) -> FastAPI:
    """Create the FastAPI app.

    Args:
        base_path: Prefix for the citizen API routes (e.g. "/test2" when the
                   mini-app is served below a sub-path). If None, reads
                   BASE_PATH from the environment. Health stays at /health.

    Returns:
        Configured FastAPI application.
    """
    if base_path is None:
        base_path = os.environ.get("BASE_PATH", "")
    base_path = _normalize_base_path(base_path)

    app = FastAPI(
        title="Tangrat citizen sync",
        docs_url=None,
        redoc_url=None,
    )

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        cid = accept_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        with correlation_scope(cid):
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response

    app.include_router(public.router)
    app.include_router(dga.router, prefix=base_path)

    return app
