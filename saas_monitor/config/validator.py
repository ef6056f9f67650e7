from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import json
import os

from jsonschema import Draft202012Validator

from saas_monitor.sla.notification import INTERVALS

DEFAULT_SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schema", "monitoring_config.json")


@dataclass
class ConfigValidationIssue:
    entry_id: Optional[str]
    level: str  # "error" | "warning"
    message: str


class ConfigValidationError(ValueError):
    def __init__(self, issues: List[ConfigValidationIssue]):
        self.issues = issues
        super().__init__("\n".join([f"{i.level.upper()}: [{i.entry_id}] {i.message}" for i in issues]))


def _load_schema(schema_path: str) -> Dict[str, Any]:
    with open(schema_path, "r", encoding="utf-8") as f:
        return json.load(f)


def validate_entries(
    entries: List[Dict[str, Any]],
    *,
    schema_path: str = DEFAULT_SCHEMA_PATH,
    strict: bool = True
) -> List[ConfigValidationIssue]:
    issues: List[ConfigValidationIssue] = []

    schema = _load_schema(schema_path)
    v = Draft202012Validator(schema)

    for err in sorted(v.iter_errors(entries), key=str):
        issues.append(ConfigValidationIssue(entry_id=None, level="error", message=err.message))

    if issues and strict:
        return issues

    seen_ids = set()
    seen_descriptions = set()
    for e in entries:
        if not isinstance(e, dict):
            continue
        eid = str(e.get("id"))

        if eid in seen_ids:
            issues.append(ConfigValidationIssue(entry_id=eid, level="error", message="Duplicate entry id"))
        else:
            seen_ids.add(eid)

        desc = str(e.get("description", "")).upper()
        if desc in seen_descriptions:
            issues.append(
                ConfigValidationIssue(
                    entry_id=eid,
                    level="warning",
                    message=f"Description '{e.get('description')}' used more than once; lookups return the first."
                )
            )
        else:
            seen_descriptions.add(desc)

        # unknown codes are kept, the scheduler skips them
        for n in e.get("notifications") or []:
            code = n.get("interval") if isinstance(n, dict) else None
            if code not in INTERVALS:
                issues.append(
                    ConfigValidationIssue(
                        entry_id=eid,
                        level="warning",
                        message=f"Notification '{n.get('task') if isinstance(n, dict) else n}' has unknown interval '{code}'."
                    )
                )

    return issues


def validate_entries_or_raise(
    entries: List[Dict[str, Any]],
    *,
    schema_path: str = DEFAULT_SCHEMA_PATH,
    strict: bool = True
) -> List[ConfigValidationIssue]:
    """Raises on errors; returns the remaining warnings."""
    issues = validate_entries(entries, schema_path=schema_path, strict=strict)
    errors = [i for i in issues if i.level == "error"]
    if errors:
        raise ConfigValidationError(issues)
    return issues
