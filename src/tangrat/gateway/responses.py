"""Upstream response normalization.

The gateway does not reliably label its bodies: JSON arrives as text/html,
HTML error pages arrive as application/json, and some errors have no body at
all. normalize_response() reads the body as text first and only then tries
JSON, so callers can tell "sent garbage" from "sent valid JSON".
"""

import json
from dataclasses import dataclass
from typing import Any

import requests

from tangrat.domain.errors import truncate_detail


@dataclass(frozen=True)
class NormalizedResponse:
    status_code: int
    is_ok: bool
    raw_text: str
    parsed_json: Any = None

    def snippet(self) -> str:
        """Leading part of the body, for diagnostics."""
        return truncate_detail(self.raw_text)


def safe_json_parse(text: str) -> Any:
    """Parse JSON, returning None for empty or malformed input."""
    if not text or not text.strip():
        return None
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return None


def _read_text(response: requests.Response) -> str:
    try:
        content = response.content
    except (requests.RequestException, OSError, RuntimeError):
        return ""
    if not content:
        return ""
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass
    try:
        return response.text
    except (requests.RequestException, UnicodeDecodeError, LookupError):
        return content.decode("utf-8", errors="replace")


def normalize_response(response: requests.Response) -> NormalizedResponse:
    """Convert a transport response into status, text and optional JSON."""
    status_code = int(response.status_code or 0)
    raw_text = _read_text(response)
    return NormalizedResponse(
        status_code=status_code,
        is_ok=200 <= status_code < 300,
        raw_text=raw_text,
        parsed_json=safe_json_parse(raw_text),
    )
