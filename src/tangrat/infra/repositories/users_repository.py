"""Users repository - citizen profiles keyed by the gateway's userId.

Uses raw SQL with psycopg2 (no ORM).

Upsert semantics
────────────────
A single INSERT ... ON CONFLICT (user_id) DO UPDATE statement:

  - unseen user_id → new row, created_at = updated_at = now()
  - known user_id  → every citizen column overwritten, updated_at = now(),
                     created_at and id untouched

The unique index on user_id makes this atomic per user without an explicit
lock. Concurrent writers for one user resolve as last-write-wins.
"""

from psycopg2.extensions import cursor as PgCursor

from tangrat.domain.models import CitizenRecord, PersistedProfile

_COLUMNS = """
    id, user_id, citizen_id, first_name, middle_name, last_name,
    date_of_birth_string, mobile, email, notification, created_at, updated_at
"""


def _row_to_profile(row: tuple) -> PersistedProfile:
    return PersistedProfile(
        id=int(row[0]),
        user_id=row[1],
        citizen_id=row[2],
        first_name=row[3],
        middle_name=row[4],
        last_name=row[5],
        date_of_birth=row[6],
        mobile=row[7],
        email=row[8],
        notification_enabled=bool(row[9]),
        created_at=row[10],
        updated_at=row[11],
    )


def upsert_user(cur: PgCursor, citizen: CitizenRecord) -> PersistedProfile:
    """Create or fully overwrite the profile for citizen.user_id.

    Args:
        cur:     Database cursor (inside a transaction).
        citizen: Extracted citizen record.

    Returns:
        The stored row, including surrogate id and timestamps.
    """
    cur.execute(
        f"""
        INSERT INTO users (
            user_id, citizen_id, first_name, middle_name, last_name,
            date_of_birth_string, mobile, email, notification
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
        ON CONFLICT (user_id) DO UPDATE
        SET citizen_id           = EXCLUDED.citizen_id,
            first_name           = EXCLUDED.first_name,
            middle_name          = EXCLUDED.middle_name,
            last_name            = EXCLUDED.last_name,
            date_of_birth_string = EXCLUDED.date_of_birth_string,
            mobile               = EXCLUDED.mobile,
            email                = EXCLUDED.email,
            notification         = EXCLUDED.notification,
            updated_at           = now()
        RETURNING {_COLUMNS}
        """,
        (
            citizen.user_id,
            citizen.citizen_id,
            citizen.first_name,
            citizen.middle_name,
            citizen.last_name,
            citizen.date_of_birth,
            citizen.mobile,
            citizen.email,
            citizen.notification_enabled,
        ),
    )
    return _row_to_profile(cur.fetchone())


def get_user(cur: PgCursor, user_id: str) -> PersistedProfile | None:
    """Fetch a profile by user_id, or None."""
    cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id = %s", (user_id,))
    row = cur.fetchone()
    return _row_to_profile(row) if row else None
