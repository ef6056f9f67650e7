from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional


def parse_iso8601(ts: str) -> datetime:
    """
    Accepts ISO timestamps like:
      - 2026-02-08T10:00:00Z
      - 2026-02-08T10:00:00+05:30
      - 2026-02-08T10:00:00
      - 2023-01-19T04:35:05.4970000+01:00 (7 fractional digits, Veeam)
    Returns timezone-aware UTC datetime.
    """
    s = ts.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    s = _trim_fraction(s)
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _trim_fraction(s: str) -> str:
    # fromisoformat() on older interpreters only takes 3 or 6 fractional digits
    if "." not in s:
        return s
    head, tail = s.split(".", 1)
    digits = ""
    for ch in tail:
        if not ch.isdigit():
            break
        digits += ch
    rest = tail[len(digits):]
    return f"{head}.{digits[:6].ljust(6, '0')}{rest}"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Vendor timestamps come as ISO strings, unix seconds (Zabbix "clock") or datetimes.
    Returns None for missing values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    s = str(value).strip()
    if s.isdigit():
        return datetime.fromtimestamp(int(s), tz=timezone.utc)
    return parse_iso8601(s)


def parse_date(value: str) -> date:
    """Calendar date from 'YYYY-MM-DD' (or a full ISO timestamp)."""
    s = value.strip()
    if len(s) > 10:
        return parse_iso8601(s).date()
    return date.fromisoformat(s)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
