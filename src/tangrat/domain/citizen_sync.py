"""Citizen sync pipeline: validate → deproc → (notify) → upsert.

Each step either advances or stops the run with exactly one step-tagged
PipelineFailure. Step errors are caught where they happen; nothing raised
inside the pipeline reaches the caller.

Status mapping:
- input     400  request body unusable
- db        500  gateway credentials missing
- validate  502  no auth token from the gateway
- deproc    502  deproc transport / body failure
- deproc    200  deproc fine but no citizen record in it
- persist   500  upsert failed
- db        500  anything unexpected
"""

from typing import Any, Callable

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

from tangrat.domain.citizen import extract_citizen_data
from tangrat.domain.errors import (
    InputValidationError,
    PersistenceError,
    PipelineError,
    UpstreamShapeError,
)
from tangrat.domain.models import (
    CitizenRecord,
    CredentialPair,
    PersistedProfile,
    PipelineFailure,
    PipelineOutcome,
    PipelineSuccess,
)
from tangrat.gateway.client import GatewayClient
from tangrat.gateway.config import GatewayConfig
from tangrat.infra.db import txn
from tangrat.infra.repositories.users_repository import upsert_user
from tangrat.observability.correlation import get_correlation_id
from tangrat.observability.logging import get_logger
from tangrat.observability.redaction import hash_identifier, safe_log_context

logger = get_logger(__name__)

SaveProfile = Callable[[CitizenRecord], PersistedProfile]


class SyncRequest(BaseModel):
    """Inbound body. Strict: numbers are not accepted as strings."""

    model_config = ConfigDict(extra="ignore", strict=True)

    appId: str
    mToken: str


def parse_credentials(body: Any) -> CredentialPair:
    """Validate the inbound body and build the credential pair.

    Raises:
        InputValidationError: If body is not an object, or appId / mToken are
            missing, not strings, or empty.
    """
    if not isinstance(body, dict):
        raise InputValidationError("Request body must be a JSON object")

    try:
        request = SyncRequest.model_validate(body)
    except ValidationError:
        raise InputValidationError("appId and mToken (string) are required in body") from None

    if not request.appId.strip() or not request.mToken.strip():
        raise InputValidationError("appId and mToken must not be empty")

    return CredentialPair(app_id=request.appId, session_token=request.mToken)


def save_profile_to_db(citizen: CitizenRecord) -> PersistedProfile:
    """Default storage: one short transaction per upsert."""
    with txn() as cur:
        return upsert_user(cur, citizen)


def _failure(error: PipelineError) -> PipelineFailure:
    log = logger.error if error.http_status >= 500 else logger.warning
    log(
        "citizen sync failed",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(),
                step=error.step,
                status=error.http_status,
                error=error.message,
            )
        },
    )
    return PipelineFailure(
        step=error.step,
        message=error.message,
        http_status=error.http_status,
        detail=error.detail,
    )


def _persist(save: SaveProfile, citizen: CitizenRecord) -> PersistedProfile:
    try:
        return save(citizen)
    except Exception as e:
        logger.exception(
            "profile upsert failed",
            extra={
                "extra_fields": safe_log_context(
                    correlationId=get_correlation_id(),
                    user_hash=hash_identifier(citizen.user_id),
                )
            },
        )
        raise PersistenceError(f"Failed to save profile: {type(e).__name__}") from e


def sync_citizen_profile(
    credentials: CredentialPair,
    *,
    config: GatewayConfig,
    client: GatewayClient | None = None,
    save: SaveProfile | None = None,
) -> PipelineOutcome:
    """Run the gateway steps and the upsert for one credential pair.

    Args:
        credentials: App id and mToken from the host app.
        config: Gateway credentials and endpoints.
        client: Gateway client (defaults to one built from config).
        save: Storage function (defaults to the users table).

    Returns:
        PipelineSuccess with the stored profile, or PipelineFailure.
    """
    client = client or GatewayClient(config)
    save = save or save_profile_to_db

    try:
        token = client.validate()

        data = client.exchange_for_citizen_data(token, credentials)
        citizen = extract_citizen_data(data)
        if citizen is None:
            raise UpstreamShapeError("Could not parse citizen data from deproc response")

        notified: bool | None = None
        if citizen.notification_enabled:
            # Best-effort: the outcome is logged by the client and never fails the run
            notified = client.notify(token, credentials.app_id, citizen)

        profile = _persist(save, citizen)

    except PipelineError as e:
        return _failure(e)
    except Exception as e:
        logger.exception(
            "citizen sync crashed",
            extra={"extra_fields": safe_log_context(correlationId=get_correlation_id())},
        )
        return PipelineFailure(
            step="db", message=f"Unexpected error: {type(e).__name__}", http_status=500
        )

    logger.info(
        "citizen profile saved",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(),
                user_hash=hash_identifier(profile.user_id),
                profile_id=profile.id,
                notified=notified,
            )
        },
    )
    return PipelineSuccess(profile=profile, notified=notified)


def run_citizen_sync(
    body: Any,
    *,
    load_config: Callable[[], GatewayConfig],
    session: requests.Session | None = None,
    save: SaveProfile | None = None,
) -> PipelineOutcome:
    """Entry point for one inbound request.

    Input and configuration are checked before any remote call is made.
    """
    try:
        credentials = parse_credentials(body)
        config = load_config()
    except PipelineError as e:
        return _failure(e)

    client = GatewayClient(config, session=session)
    return sync_citizen_profile(credentials, config=config, client=client, save=save)
