"""PostgreSQL access through psycopg2 (raw SQL, no ORM).

- get_conn(): new connection from DATABASE_URL (+ DB_PASSWORD fallback)
- txn(): one short transaction, committed on success, rolled back on error
"""

import os
from contextlib import ExitStack, closing, contextmanager
from typing import Iterator
from urllib.parse import urlparse

import psycopg2
from psycopg2.extensions import connection as PgConnection, cursor as PgCursor


def _dsn_has_password(dsn: str) -> bool:
    if "://" in dsn:
        return bool(urlparse(dsn).password)
    return any(part.startswith("password=") for part in dsn.split())


def get_conn() -> PgConnection:
    """Open a connection from DATABASE_URL.

    DATABASE_URL may be a URL or a libpq key=value DSN. When it carries no
    password and DB_PASSWORD is set (secret mounted separately), that is
    passed alongside.

    Raises:
        RuntimeError: If DATABASE_URL is not set.
        psycopg2.Error: On connection failure.
    """
    dsn = os.environ.get("DATABASE_URL")
    if not dsn:
        raise RuntimeError("DATABASE_URL environment variable not set")

    db_password = os.environ.get("DB_PASSWORD", "")
    if db_password and not _dsn_has_password(dsn):
        return psycopg2.connect(dsn, password=db_password)
    return psycopg2.connect(dsn)


@contextmanager
def txn(conn: PgConnection | None = None) -> Iterator[PgCursor]:
    """Run a block inside one transaction.

    With no conn, a connection is opened for the block and closed after it.

    Example:
        with txn() as cur:
            profile = upsert_user(cur, citizen)
    """
    with ExitStack() as stack:
        if conn is None:
            conn = stack.enter_context(closing(get_conn()))
        cur = stack.enter_context(conn.cursor())
        try:
            yield cur
        except BaseException:
            conn.rollback()
            raise
        conn.commit()
