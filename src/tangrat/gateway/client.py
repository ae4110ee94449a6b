"""HTTP client for the DGA identity gateway.

Three independent calls, one attempt each:
- validate: consumer credentials -> short-lived auth token
- deproc: app id + mToken + auth token -> citizen data
- notify: best-effort push message to the citizen

Security: NEVER log tokens, mTokens, names or citizen ids. User ids are
logged as hashes only.
"""

from typing import Any

import requests

from tangrat.domain.errors import UpstreamTransportError
from tangrat.domain.models import CitizenRecord, CredentialPair
from tangrat.gateway.config import GatewayConfig
from tangrat.gateway.responses import NormalizedResponse, normalize_response
from tangrat.infra.time import to_iso, utc_now
from tangrat.observability.correlation import get_correlation_id
from tangrat.observability.logging import get_logger
from tangrat.observability.redaction import hash_identifier, safe_log_context

logger = get_logger(__name__)

NOTIFICATION_TEMPLATE = "สวัสดี {first_name} {last_name} นี่คือข้อความทดสอบจากระบบ"


def is_validate_response(value: Any) -> bool:
    """True if the body carries a non-empty textual Result token."""
    if not isinstance(value, dict):
        return False
    result = value.get("Result")
    return isinstance(result, str) and bool(result.strip())


def _is_empty_json(value: Any) -> bool:
    """True for a missing body or a falsy scalar (null, false, 0, "")."""
    if isinstance(value, (dict, list)):
        return False
    return not value


def build_notification_message(citizen: CitizenRecord) -> str:
    return NOTIFICATION_TEMPLATE.format(
        first_name=citizen.first_name or "",
        last_name=citizen.last_name or "",
    )


class GatewayClient:
    """Client for validate / deproc / notification push.

    Usage:
        client = GatewayClient(load_gateway_config())
        token = client.validate()
        data = client.exchange_for_citizen_data(token, credentials)
    """

    def __init__(
        self,
        config: GatewayConfig,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config
        self._session = session or requests.Session()

    def _base_headers(self) -> dict[str, str]:
        return {
            "Consumer-Key": self._config.consumer_key,
            "Content-Type": "application/json",
        }

    def _authed_headers(self, token: str) -> dict[str, str]:
        return {**self._base_headers(), "Token": token}

    def _log_ctx(self, step: str, **kwargs: Any) -> dict[str, str]:
        return safe_log_context(correlationId=get_correlation_id(), step=step, **kwargs)

    def _send(self, step: str, method: str, url: str, **kwargs: Any) -> NormalizedResponse:
        """Perform one request; transport errors become step-tagged failures."""
        try:
            response = self._session.request(
                method, url, timeout=self._config.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.error(
                "gateway request failed",
                extra={"extra_fields": self._log_ctx(step, error_type=type(e).__name__)},
            )
            # The exception text carries the request URL, ConsumerSecret included
            raise UpstreamTransportError(
                step, f"{step} request failed: {type(e).__name__}"
            ) from e

        normalized = normalize_response(response)
        logger.info(
            "gateway response received",
            extra={
                "extra_fields": self._log_ctx(
                    step,
                    status=normalized.status_code,
                    body_len=len(normalized.raw_text),
                    is_json=normalized.parsed_json is not None,
                )
            },
        )
        return normalized

    def validate(self) -> str:
        """Exchange consumer credentials for an auth token.

        Raises:
            UpstreamTransportError: step "validate", on any non-2xx status,
                transport failure, or a body without a usable Result.
        """
        v = self._send(
            "validate",
            "GET",
            self._config.validate_url,
            params={
                "ConsumerSecret": self._config.consumer_secret,
                "AgentID": self._config.agent_id,
            },
            headers=self._base_headers(),
        )

        if not v.is_ok or not is_validate_response(v.parsed_json):
            raise UpstreamTransportError(
                "validate",
                f"Failed to get Token from validate (HTTP {v.status_code})",
                v.snippet(),
            )

        return v.parsed_json["Result"]

    def exchange_for_citizen_data(self, token: str, credentials: CredentialPair) -> Any:
        """Call deproc and return its parsed body as-is.

        Whether the body holds a citizen record is the caller's decision.

        Raises:
            UpstreamTransportError: step "deproc", on non-2xx status, transport
                failure, or an empty / non-JSON body.
        """
        d = self._send(
            "deproc",
            "POST",
            self._config.deproc_url,
            json={"Appid": credentials.app_id, "MToken": credentials.session_token},
            headers=self._authed_headers(token),
        )

        if not d.is_ok:
            raise UpstreamTransportError(
                "deproc",
                f"deproc API returned non-OK status (HTTP {d.status_code})",
                d.snippet(),
            )

        if _is_empty_json(d.parsed_json):
            raise UpstreamTransportError(
                "deproc",
                "deproc response is not JSON or empty body",
                d.snippet(),
            )

        return d.parsed_json

    def notify(self, token: str, app_id: str, citizen: CitizenRecord) -> bool:
        """Push a greeting to the citizen. Never raises.

        Returns:
            True if the gateway accepted the push (2xx), False otherwise.
        """
        body = {
            "appid": app_id,
            "data": [
                {
                    "message": build_notification_message(citizen),
                    "userId": citizen.user_id,
                }
            ],
            "sendDateTime": to_iso(utc_now()),
        }

        user_hash = hash_identifier(citizen.user_id)

        try:
            n = self._send(
                "notify",
                "POST",
                self._config.notification_url,
                json=body,
                headers=self._authed_headers(token),
            )
        except Exception as e:
            # Push is best-effort; nothing here may fail the sync
            logger.warning(
                "notification push not delivered",
                extra={
                    "extra_fields": self._log_ctx(
                        "notify", user_hash=user_hash, error_type=type(e).__name__
                    )
                },
            )
            return False

        if not n.is_ok:
            logger.warning(
                "notification API returned non-OK status",
                extra={
                    "extra_fields": self._log_ctx(
                        "notify", user_hash=user_hash, status=n.status_code
                    )
                },
            )
            return False

        return True
