"""Shared test helpers for tangrat tests.

Regular functions and fakes, importable from conftest.py and test modules.
These are NOT fixtures.
"""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

import requests

from tangrat.domain.models import CitizenRecord, PersistedProfile
from tangrat.gateway.config import GatewayConfig

TEST_ENV = {
    "CONSUMER_KEY": "ck-test",
    "CONSUMER_SECRET": "cs-test",
    "AGENT_ID": "agent-test",
}

TEST_CONFIG = GatewayConfig(
    consumer_key="ck-test",
    consumer_secret="cs-test",
    agent_id="agent-test",
    base_url="https://gateway.test",
    czp_environment="uat",
    timeout=3.0,
)

CITIZEN_PAYLOAD = {
    "messageCode": 200,
    "message": "Success",
    "result": {
        "userId": "user-0001",
        "citizenId": "1234567890123",
        "firstName": "สมชาย",
        "middleName": None,
        "lastName": "ใจดี",
        "dateOfBirthString": "01/01/2530",
        "mobile": "0812345678",
        "email": "somchai@example.com",
        "notification": True,
    },
}


def make_response(
    status_code: int = 200,
    body: Any = b"",
    headers: dict[str, str] | None = None,
) -> requests.Response:
    """Build an in-memory requests.Response.

    dict/list bodies are JSON-encoded, str bodies UTF-8 encoded, bytes kept.
    """
    if isinstance(body, (dict, list)):
        content = json.dumps(body).encode("utf-8")
    elif isinstance(body, str):
        content = body.encode("utf-8")
    else:
        content = body

    resp = requests.Response()
    resp.status_code = status_code
    resp._content = content
    resp.headers.update(headers or {"Content-Type": "application/json"})
    resp.url = "https://gateway.test/"
    return resp


class FakeSession:
    """Stand-in for requests.Session routing by URL fragment.

    routes maps a URL fragment ("validate", "deproc", "notification") to a
    Response, or to an exception instance to raise.
    """

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes = routes or {}
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append({"method": method, "url": url, **kwargs})
        for fragment, outcome in self.routes.items():
            if fragment in url:
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise AssertionError(f"unexpected request to {url}")

    def calls_to(self, fragment: str) -> list[dict[str, Any]]:
        return [c for c in self.calls if fragment in c["url"]]


def happy_routes(
    citizen_payload: Any = None,
    notify_status: int = 200,
) -> dict[str, Any]:
    return {
        "validate": make_response(200, {"Result": "tok123"}),
        "deproc": make_response(200, CITIZEN_PAYLOAD if citizen_payload is None else citizen_payload),
        "notification": make_response(notify_status, {"messageCode": 200}),
    }


class InMemoryUserStore:
    """Upsert-by-user_id store mirroring the users table semantics."""

    def __init__(self, clock_start: datetime | None = None) -> None:
        self.rows: dict[str, PersistedProfile] = {}
        self.writes = 0
        self._next_id = 1
        self._now = clock_start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._now = self._now + timedelta(seconds=1)
        return self._now

    def save(self, citizen: CitizenRecord) -> PersistedProfile:
        self.writes += 1
        now = self._tick()
        existing = self.rows.get(citizen.user_id)
        if existing is None:
            profile = PersistedProfile(
                id=self._next_id,
                user_id=citizen.user_id,
                citizen_id=citizen.citizen_id,
                first_name=citizen.first_name,
                middle_name=citizen.middle_name,
                last_name=citizen.last_name,
                date_of_birth=citizen.date_of_birth,
                mobile=citizen.mobile,
                email=citizen.email,
                notification_enabled=citizen.notification_enabled,
                created_at=now,
                updated_at=now,
            )
            self._next_id += 1
        else:
            profile = replace(
                existing,
                citizen_id=citizen.citizen_id,
                first_name=citizen.first_name,
                middle_name=citizen.middle_name,
                last_name=citizen.last_name,
                date_of_birth=citizen.date_of_birth,
                mobile=citizen.mobile,
                email=citizen.email,
                notification_enabled=citizen.notification_enabled,
                updated_at=now,
            )
        self.rows[citizen.user_id] = profile
        return profile
