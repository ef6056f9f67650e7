from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List
import yaml


class ConfigLoadError(ValueError):
    pass


def _plain(value: Any) -> Any:
    # YAML turns unquoted dates into date objects; the schema expects strings
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def load_yaml_file(path: str, *, root: type = list, missing_ok: bool = False) -> Any:
    """
    YAML document whose top level must be of type `root`. An empty file gives root(),
    as does a missing one when missing_ok is set.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        if missing_ok:
            return root()
        raise ConfigLoadError(f"File not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed to parse YAML: {path} ({e})") from e

    if data is None:
        return root()
    if not isinstance(data, root):
        raise ConfigLoadError(f"YAML root must be a {root.__name__}: {path}")
    return data


def load_config_file(path: str) -> List[Dict[str, Any]]:
    """monitoring.yml entries with dates as ISO strings, ready for schema validation."""
    return _plain(load_yaml_file(path))


def load_yaml_list(path: str) -> List[Any]:
    """Plain YAML list file (feed seen-sets, company lists). Missing file gives []."""
    return load_yaml_file(path, missing_ok=True)
