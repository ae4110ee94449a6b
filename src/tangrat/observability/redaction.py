"""Redaction helpers for safe logging. Citizen data must pass through these."""

import hashlib
import re
from typing import Any

_REDACTED = "[REDACTED]"

# Applied in order: Thai national ID (13 digits, optionally grouped
# 1-2345-67890-12-3), then phone numbers, then e-mail addresses.
_PII_PATTERNS = (
    re.compile(r"\b\d[\s\-]?\d{4}[\s\-]?\d{5}[\s\-]?\d{2}[\s\-]?\d\b"),
    re.compile(r"\+?\d[\d\s\-()]{7,}\d"),
    re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"),
)


def redact_string(value: str) -> str:
    """Replace citizen IDs, phone numbers and e-mails with a marker."""
    for pattern in _PII_PATTERNS:
        value = pattern.sub(_REDACTED, value)
    return value


def redact_value(value: Any) -> str:
    """Render any value for logging without leaking its content.

    Scalars are kept (strings are pattern-redacted); containers are reduced
    to their shape; anything else to its type name.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return redact_string(value)
    if isinstance(value, dict):
        return f"dict(keys={list(value.keys())})"
    if isinstance(value, (list, tuple, set, frozenset)):
        return f"list(len={len(value)})"
    return f"<{type(value).__name__}>"


def safe_log_context(**kwargs: Any) -> dict[str, str]:
    """Build a context dict safe for logging. All values are redacted."""
    return {key: redact_value(value) for key, value in kwargs.items()}


def hash_identifier(value: str) -> str:
    """Non-reversible short hash for correlating a user across log lines."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]
