"""Tests for the users repository."""

import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tangrat.domain.models import CitizenRecord
from tangrat.infra.repositories.users_repository import get_user, upsert_user

CITIZEN = CitizenRecord(
    user_id="user-0001",
    citizen_id="1234567890123",
    first_name="สมชาย",
    last_name="ใจดี",
    date_of_birth="01/01/2530",
    mobile="0812345678",
    email="somchai@example.com",
    notification_enabled=True,
)

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
ROW = (
    7, "user-0001", "1234567890123", "สมชาย", None, "ใจดี",
    "01/01/2530", "0812345678", "somchai@example.com", True, T0, T0,
)


class TestUpsertUserSql:
    """Statement shape and row mapping, with a mocked cursor."""

    def test_single_on_conflict_statement(self):
        cur = MagicMock()
        cur.fetchone.return_value = ROW

        upsert_user(cur, CITIZEN)

        cur.execute.assert_called_once()
        sql, params = cur.execute.call_args[0]
        assert "ON CONFLICT (user_id) DO UPDATE" in sql
        assert "RETURNING" in sql
        assert "updated_at           = now()" in sql
        assert "created_at" not in sql.split("DO UPDATE")[1].split("RETURNING")[0]
        assert params == (
            "user-0001", "1234567890123", "สมชาย", None, "ใจดี",
            "01/01/2530", "0812345678", "somchai@example.com", True,
        )

    def test_row_mapped_to_profile(self):
        cur = MagicMock()
        cur.fetchone.return_value = ROW

        profile = upsert_user(cur, CITIZEN)

        assert profile.id == 7
        assert profile.user_id == "user-0001"
        assert profile.notification_enabled is True
        assert profile.created_at == T0
        assert profile.to_dict()["createdAt"] == "2026-01-01T00:00:00.000Z"

    def test_get_user_missing(self):
        cur = MagicMock()
        cur.fetchone.return_value = None
        assert get_user(cur, "nobody") is None


_skip_no_db = pytest.mark.skipif(
    not os.environ.get("DATABASE_URL"),
    reason="DATABASE_URL not set - skipping DB integration tests",
)

_SCHEMA = Path(__file__).resolve().parents[1] / "migrations" / "sql" / "001_users.sql"


@pytest.fixture
def db_user_id():
    """Unique user id, cleaned up after the test."""
    from tangrat.infra.db import txn

    with txn() as cur:
        cur.execute(_SCHEMA.read_text(encoding="utf-8"))

    user_id = f"test-{uuid.uuid4()}"
    yield user_id

    with txn() as cur:
        cur.execute("DELETE FROM users WHERE user_id = %s", (user_id,))


@_skip_no_db
class TestUpsertUserDb:
    def test_create_then_overwrite(self, db_user_id):
        from tangrat.infra.db import txn

        with txn() as cur:
            first = upsert_user(cur, CitizenRecord(user_id=db_user_id, first_name="A", email="a@x.io"))
        with txn() as cur:
            second = upsert_user(cur, CitizenRecord(user_id=db_user_id, first_name="B"))

        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.updated_at >= first.updated_at
        assert second.first_name == "B"
        assert second.email is None

        with txn() as cur:
            assert get_user(cur, db_user_id) == second
