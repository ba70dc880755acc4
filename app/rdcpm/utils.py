from __future__ import annotations

import re
from datetime import date, datetime, timezone

from flask import request

from app.rdcpm.errors import ValidationError

# Region keys are slugs ("anna-regina") or uuids.
_REGION_ID_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_-]{0,63}")


def parse_date(s) -> date | None:
    """Parse YYYY-MM-DD (a full ISO timestamp is truncated to its date). Raises ValueError."""
    if s is None:
        return None
    if isinstance(s, datetime):
        return s.date()
    if isinstance(s, date):
        return s
    s = str(s).strip()
    if not s:
        return None
    return date.fromisoformat(s[:10])


def parse_datetime(s) -> datetime | None:
    """Parse an ISO timestamp to naive UTC. A trailing Z is accepted. Raises ValueError."""
    if s is None:
        return None
    if isinstance(s, datetime):
        value = s
    else:
        if not isinstance(s, str):
            raise ValueError("timestamp must be a string")
        s = s.strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        value = datetime.fromisoformat(s)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_number(v) -> float | None:
    """Parse a number from JSON (int/float/numeric string). Raises ValueError."""
    if v is None or v == "":
        return None
    if isinstance(v, bool):
        raise ValueError("boolean is not a number")
    return float(v)


def clean_str(v) -> str | None:
    if v is None:
        return None
    v = str(v).strip()
    return v or None


def iso(d: date | datetime | None) -> str | None:
    return d.isoformat() if d else None


def json_body() -> dict:
    """Request JSON as a dict. A missing or unparseable body is {}; any other JSON value is a 400."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError(["Request body must be a JSON object."])
    return payload


def is_region_id(v) -> bool:
    return isinstance(v, str) and bool(_REGION_ID_RE.fullmatch(v))
