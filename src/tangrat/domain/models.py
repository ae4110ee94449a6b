"""Citizen sync models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tangrat.domain.errors import Step
from tangrat.infra.time import to_iso


@dataclass(frozen=True)
class CredentialPair:
    """App id and session token (mToken) handed over by the host app.

    Transient: never persisted, never logged.
    """

    app_id: str
    session_token: str = field(repr=False)


@dataclass(frozen=True)
class CitizenRecord:
    """Canonical citizen data lifted out of a deproc response."""

    user_id: str
    citizen_id: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    date_of_birth: str | None = None
    mobile: str | None = None
    email: str | None = None
    notification_enabled: bool = False


@dataclass(frozen=True)
class PersistedProfile:
    """A row of the users table."""

    id: int
    user_id: str
    citizen_id: str | None
    first_name: str | None
    middle_name: str | None
    last_name: str | None
    date_of_birth: str | None
    mobile: str | None
    email: str | None
    notification_enabled: bool
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the API (camelCase keys, ISO-8601 timestamps)."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "citizenId": self.citizen_id,
            "firstName": self.first_name,
            "middleName": self.middle_name,
            "lastName": self.last_name,
            "dateOfBirthString": self.date_of_birth,
            "mobile": self.mobile,
            "email": self.email,
            "notification": self.notification_enabled,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }


@dataclass(frozen=True)
class PipelineSuccess:
    profile: PersistedProfile
    notified: bool | None = None

    ok = True
    http_status = 200

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "saved": self.profile.to_dict()}


@dataclass(frozen=True)
class PipelineFailure:
    """Exactly one failed step, with the status the API reports it at."""

    step: Step
    message: str
    http_status: int
    detail: str | None = None

    ok = False

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"ok": False, "error": self.message, "step": self.step}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


PipelineOutcome = PipelineSuccess | PipelineFailure
