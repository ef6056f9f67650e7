from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


class PersistentCache:
    """
    Key/value cache kept in a YAML mapping file.

    fetch() falls back to a loader for missing keys and stores its result. Nothing is
    written until persist(), and only when something changed. None values are dropped
    on persist so the loader runs again for them next time.
    """

    def __init__(self, path: str = "cache.yml"):
        self.path = path
        self.dirty = False
        self._data: Dict[Any, Any] = self._load()

    def _load(self) -> Dict[Any, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.warning("Error loading %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            return {}
        return data

    def __contains__(self, key: Any) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def fetch(self, key: Any, loader: Optional[Callable[[], Any]] = None) -> Any:
        if key in self._data:
            return self._data[key]
        if loader is None:
            return None
        value = loader()
        self.store(key, value)
        return value

    def store(self, key: Any, value: Any) -> None:
        self.dirty = True
        self._data[key] = value

    def delete(self, key: Any) -> None:
        self.dirty = True
        self._data.pop(key, None)

    def persist(self) -> bool:
        if not self.dirty:
            return False
        compacted = {k: v for k, v in self._data.items() if v is not None}
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(compacted, f, sort_keys=True)
        self.dirty = False
        return True
