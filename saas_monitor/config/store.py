from __future__ import annotations

import logging
import os
import threading
from typing import Any, Iterable, List, Optional, Sequence

import yaml

from saas_monitor.config.entry import ConfigEntry
from saas_monitor.config.loader import load_config_file
from saas_monitor.config.validator import DEFAULT_SCHEMA_PATH, validate_entries_or_raise

logger = logging.getLogger(__name__)

REPORT_SERVICES = ("CloudAlly", "Skykick", "Sophos", "Veeam", "Integra365", "Zabbix")


def _on_off(flag: bool) -> str:
    return "on" if flag else ""


def _sla_documentation(cfg: ConfigEntry, service: str) -> str:
    if service not in cfg.source:
        return ""
    sla = next((s for s in cfg.sla if service in s), None)
    if not sla:
        return "x"
    return sla.replace(f"{service}-", "")


class MonitoringConfig:
    """
    The monitoring.yml entries: one per customer, shared by all vendor monitors.

    Lookups by id or description mark the entry as touched; compact() drops every entry
    no monitor touched during this run. Mutations and saves are serialized by a
    re-entrant lock.
    """

    def __init__(self, path: str = "monitoring.yml", *, schema_path: str = DEFAULT_SCHEMA_PATH):
        self.path = path
        self.schema_path = schema_path
        self._lock = threading.RLock()
        self._entries: List[ConfigEntry] = []

        if os.path.isfile(path):
            raw = load_config_file(path)
            warnings = validate_entries_or_raise(raw, schema_path=schema_path)
            for w in warnings:
                logger.warning("%s: [%s] %s", path, w.entry_id, w.message)
            self._entries = [ConfigEntry.from_dict(d).untouch() for d in raw]

    @property
    def entries(self) -> List[ConfigEntry]:
        return self._entries

    def by_id(self, entry_id: Any) -> Optional[ConfigEntry]:
        key = str(entry_id)
        found = next((e for e in self._entries if e.id == key), None)
        return found.touch() if found else None

    def by_description(self, description: str) -> Optional[ConfigEntry]:
        key = description.upper()
        found = next((e for e in self._entries if e.description.upper() == key), None)
        return found.touch() if found else None

    def add_entry(self, entry: ConfigEntry) -> ConfigEntry:
        with self._lock:
            self._entries.append(entry)
        return entry

    def delete_entry(self, entry: ConfigEntry) -> None:
        with self._lock:
            self._entries = [e for e in self._entries if e is not entry]

    def compact(self) -> List[ConfigEntry]:
        """Removes untouched entries, returns the removed ones."""
        with self._lock:
            removed = [e for e in self._entries if not e.touched]
            for e in removed:
                logger.info("removed customer %s", e.description)
            self._entries = [e for e in self._entries if e.touched]
        return removed

    def save_config(self) -> None:
        with self._lock:
            ordered = sorted(self._entries, key=lambda e: e.description.upper())
            data = [e.to_dict() for e in ordered]
            tmp = f"{self.path}.tmp"
            with open(tmp, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
            os.replace(tmp, self.path)

    def load_config(self, source: str, tenants: Iterable[Any]) -> List[ConfigEntry]:
        """
        Reconciles the vendor's tenant list with the configuration: a known id keeps its
        entry (renamed if the vendor description changed), else the description is used,
        else a new entry is created. Every matched entry gets `source` added.
        """
        with self._lock:
            for tenant in tenants:
                tid = str(tenant.id)
                description = tenant.description

                cfg = self.by_id(tid)
                if cfg is not None:
                    if cfg.description != description:
                        logger.info("Rename tenant [%s] to [%s]", cfg.description, description)
                else:
                    cfg = self.by_description(description)
                    if cfg is None:
                        logger.info("New tenant [%s]", description)
                        cfg = self.add_entry(ConfigEntry(id=tid, description=description).touch())

                cfg.description = description
                if source not in cfg.source:
                    cfg.source.append(source)
            return self._entries

    def report_lines(self, services: Sequence[str] = REPORT_SERVICES) -> List[str]:
        lines = [
            f"| Company | Notifications | Ticket | Endpoints | Backup | Monitoring | DTC | {' | '.join(services)} |",
            "|:--|:--:|:--:|:--:|:--:|:--:|:--:|" + ":--: | " * len(services),
        ]
        for cfg in self._entries:
            notifications = str(len(cfg.notifications)) if cfg.notifications else ""
            columns = "".join(f"{_sla_documentation(cfg, s)}|" for s in services)
            lines.append(
                f"|{cfg.description}|{notifications}"
                f"|{_on_off(cfg.create_ticket)}|{_on_off(cfg.monitor_endpoints)}"
                f"|{_on_off(cfg.monitor_backup)}|{_on_off(cfg.monitor_connectivity)}"
                f"|{_on_off(cfg.monitor_dtc)}|{columns}"
            )
        return lines

    def report(self, path: str = "configuration.md") -> str:
        with open(path, "w", encoding="utf-8") as f:
            f.write("\n".join(self.report_lines()) + "\n")
        logger.info("%s written", path)
        return path
