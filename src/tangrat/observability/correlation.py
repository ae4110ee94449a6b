"""Request correlation ids, propagated through a ContextVar."""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Inbound ids longer than this are replaced rather than echoed into logs.
MAX_CORRELATION_ID_LENGTH = 128


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def accept_correlation_id(value: str | None) -> str:
    """Return the inbound id when usable, otherwise a fresh one."""
    if value and len(value) <= MAX_CORRELATION_ID_LENGTH and value.isprintable():
        return value
    return generate_correlation_id()


def get_correlation_id() -> str:
    return correlation_id_var.get()


def set_correlation_id(cid: str) -> Token[str]:
    return correlation_id_var.set(cid)


def reset_correlation_id(token: Token[str]) -> None:
    correlation_id_var.reset(token)


@contextmanager
def correlation_scope(cid: str | None = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block.

    Used by the HTTP middleware and by command-line entry points, which
    have no inbound header to read from.
    """
    resolved = cid or generate_correlation_id()
    token = set_correlation_id(resolved)
    try:
        yield resolved
    finally:
        reset_correlation_id(token)
