"""Citizen data extraction from deproc responses.

The gateway has shipped the citizen payload both bare and wrapped
(``{"result": {...}}``, ``{"data": {...}}``, ``{"messageCode": 200,
"result": [...]}``), and with varying key casing. extract_citizen_data()
accepts any JSON value and either returns a CitizenRecord or None; it never
raises.

Search order
────────────
1. The value itself, if it is an object carrying a usable userId.
2. Wrapper keys, in WRAPPER_KEYS order, breadth-first down to MAX_DEPTH.
   A list wrapper contributes its first object element only.

The first object that qualifies wins, so the same input always yields the
same record.
"""

from typing import Any

from tangrat.domain.models import CitizenRecord

WRAPPER_KEYS = ("result", "data", "value", "payload", "citizen", "user", "profile")

MAX_DEPTH = 3

# Canonical field -> accepted spellings, already folded (see _fold).
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "user_id": ("userid",),
    "citizen_id": ("citizenid", "pid"),
    "first_name": ("firstname",),
    "middle_name": ("middlename",),
    "last_name": ("lastname",),
    "date_of_birth": ("dateofbirthstring", "dateofbirth", "birthdate"),
    "mobile": ("mobile", "phone"),
    "email": ("email",),
    "notification_enabled": ("notification", "notificationenabled"),
}

_TRUE_STRINGS = frozenset({"true", "yes", "y", "1", "on"})
_FALSE_STRINGS = frozenset({"false", "no", "n", "0", "off", ""})


def _fold(key: str) -> str:
    return key.replace("_", "").replace("-", "").lower()


def _folded_view(obj: dict[Any, Any]) -> dict[str, Any]:
    """Map folded key -> value, keeping the first spelling seen."""
    view: dict[str, Any] = {}
    for key, value in obj.items():
        if isinstance(key, str):
            view.setdefault(_fold(key), value)
    return view


def _lookup(view: dict[str, Any], canonical: str) -> Any:
    for alias in FIELD_ALIASES[canonical]:
        if alias in view:
            return view[alias]
    return None


def _as_text(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def coerce_flag(value: Any) -> bool:
    """Strict bool from a loosely typed flag. Unknown shapes are False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        folded = value.strip().lower()
        if folded in _TRUE_STRINGS:
            return True
        if folded in _FALSE_STRINGS:
            return False
    return False


def _user_id(view: dict[str, Any]) -> str | None:
    raw = _lookup(view, "user_id")
    # Floats are not identifiers; integers are tolerated and converted.
    if isinstance(raw, float):
        return None
    return _as_text(raw)


def _to_record(obj: dict[Any, Any]) -> CitizenRecord | None:
    view = _folded_view(obj)
    user_id = _user_id(view)
    if user_id is None:
        return None

    return CitizenRecord(
        user_id=user_id,
        citizen_id=_as_text(_lookup(view, "citizen_id")),
        first_name=_as_text(_lookup(view, "first_name")),
        middle_name=_as_text(_lookup(view, "middle_name")),
        last_name=_as_text(_lookup(view, "last_name")),
        date_of_birth=_as_text(_lookup(view, "date_of_birth")),
        mobile=_as_text(_lookup(view, "mobile")),
        email=_as_text(_lookup(view, "email")),
        notification_enabled=coerce_flag(_lookup(view, "notification_enabled")),
    )


def _unwrap(value: Any) -> dict[Any, Any] | None:
    if isinstance(value, dict):
        return value
    if isinstance(value, list):
        for item in value:
            if isinstance(item, dict):
                return item
    return None


def extract_citizen_data(value: Any) -> CitizenRecord | None:
    """Return the citizen record carried by a JSON value, or None."""
    frontier = [_unwrap(value)]

    for _ in range(MAX_DEPTH + 1):
        next_frontier: list[dict[Any, Any] | None] = []
        for candidate in frontier:
            if candidate is None:
                continue
            record = _to_record(candidate)
            if record is not None:
                return record
            view = _folded_view(candidate)
            for key in WRAPPER_KEYS:
                if key in view:
                    next_frontier.append(_unwrap(view[key]))
        if not next_frontier:
            break
        frontier = next_frontier

    return None
