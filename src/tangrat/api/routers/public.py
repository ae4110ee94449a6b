"""Operational routes: liveness and readiness."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from tangrat.domain.errors import ConfigurationError
from tangrat.gateway.config import load_gateway_config

router = APIRouter(tags=["ops"])


@router.get("/health")
def health() -> dict:
    """Liveness: the process is up."""
    return {"status": "ok"}


@router.get("/health/ready")
def ready() -> JSONResponse:
    """Readiness: gateway credentials are configured.

    Never echoes credential values; only whether they loaded.
    """
    try:
        config = load_gateway_config()
    except ConfigurationError as e:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "error": e.message},
        )
    return JSONResponse(
        status_code=200,
        content={"status": "ok", "gateway": config.base_url, "env": config.czp_environment},
    )
