from __future__ import annotations

from typing import Any, Mapping, Optional


def get_path(raw: Optional[Mapping[str, Any]], path: str) -> str:
    """
    Nested lookup on vendor payloads using dotted paths like "managedAgent.name".
    Returns "" when raw is missing or any segment is absent.
    """
    if raw is None:
        return ""
    cur: Any = raw
    for part in path.split("."):
        if not isinstance(cur, Mapping):
            return ""
        if part not in cur:
            return ""
        cur = cur[part]
    if cur is None:
        return ""
    return str(cur)
