"""Citizen sync endpoint for the DGA mini-app.

POST /api/dga  {"appId": "...", "mToken": "..."}

The mini-app page obtains appId/mToken from the host SDK (or its URL
fallback) and posts them here. The response is always a JSON object with
an "ok" discriminator; see tangrat.domain.citizen_sync for the status map.

Security: the request body holds a live session token. NEVER log it.
"""

from typing import Any, Callable

import requests
from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from tangrat.domain.citizen_sync import SaveProfile, run_citizen_sync, save_profile_to_db
from tangrat.domain.models import PipelineFailure
from tangrat.gateway.config import GatewayConfig, load_gateway_config
from tangrat.observability.correlation import get_correlation_id
from tangrat.observability.logging import get_logger
from tangrat.observability.redaction import safe_log_context

router = APIRouter(prefix="/api", tags=["dga"])

logger = get_logger(__name__)


def get_config_loader() -> Callable[[], GatewayConfig]:
    """Config loader dependency (overridable in tests)."""
    return load_gateway_config


def get_gateway_session() -> requests.Session | None:
    """HTTP session dependency. None lets the client open its own."""
    return None


def get_profile_saver() -> SaveProfile:
    """Storage dependency (overridable in tests)."""
    return save_profile_to_db


@router.post("/dga")
async def sync_citizen(
    request: Request,
    load_config: Callable[[], GatewayConfig] = Depends(get_config_loader),
    session: requests.Session | None = Depends(get_gateway_session),
    save: SaveProfile = Depends(get_profile_saver),
) -> JSONResponse:
    """Validate with the gateway, fetch citizen data, notify, and upsert.

    Returns:
        200 {"ok": true, "saved": {...}} on success.
        200 {"ok": false, "step": "deproc"} when no citizen data was found.
        400 on malformed input, 502 on gateway failures, 500 otherwise.
    """
    correlation_id = get_correlation_id()

    try:
        body: Any = await request.json()
    except Exception:
        logger.warning(
            "invalid json body",
            extra={"extra_fields": safe_log_context(correlationId=correlation_id)},
        )
        failure = PipelineFailure(
            step="input", message="Request body must be JSON", http_status=400
        )
        return JSONResponse(status_code=failure.http_status, content=failure.to_dict())

    outcome = await run_in_threadpool(
        run_citizen_sync,
        body,
        load_config=load_config,
        session=session,
        save=save,
    )

    return JSONResponse(status_code=outcome.http_status, content=outcome.to_dict())
