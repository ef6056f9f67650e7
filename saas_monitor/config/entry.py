from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from saas_monitor.sla.notification import Notification
from saas_monitor.timeutils import parse_timestamp


@dataclass
class ConfigEntry:
    id: str
    description: str
    source: List[str] = field(default_factory=list)
    sla: List[str] = field(default_factory=list)
    monitor_endpoints: bool = False
    monitor_connectivity: bool = False
    monitor_backup: bool = False
    monitor_dtc: bool = False
    create_ticket: bool = False
    notifications: List[Notification] = field(default_factory=list)
    backup_domain: Optional[str] = None
    last_backup: Optional[datetime] = None
    reported_alerts: List[str] = field(default_factory=list)
    endpoints: Optional[int] = None

    # set while reconciling tenants, never persisted
    touched: bool = field(default=False, compare=False, repr=False)

    def monitoring(self) -> bool:
        return self.monitor_endpoints or self.monitor_connectivity or self.monitor_backup or self.monitor_dtc

    def touch(self) -> "ConfigEntry":
        self.touched = True
        return self

    def untouch(self) -> "ConfigEntry":
        self.touched = False
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "source": list(self.source),
            "sla": list(self.sla),
            "monitor_endpoints": self.monitor_endpoints,
            "monitor_connectivity": self.monitor_connectivity,
            "monitor_backup": self.monitor_backup,
            "monitor_dtc": self.monitor_dtc,
            "create_ticket": self.create_ticket,
            "notifications": [n.to_dict() for n in self.notifications],
            "backup_domain": self.backup_domain,
            "last_backup": self.last_backup.isoformat() if self.last_backup else None,
            "reported_alerts": [str(a) for a in self.reported_alerts],
            "endpoints": self.endpoints,
        }

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "ConfigEntry":
        return ConfigEntry(
            id=str(d["id"]),
            description=str(d["description"]),
            source=list(d.get("source") or []),
            sla=list(d.get("sla") or []),
            monitor_endpoints=bool(d.get("monitor_endpoints", False)),
            monitor_connectivity=bool(d.get("monitor_connectivity", False)),
            monitor_backup=bool(d.get("monitor_backup", False)),
            monitor_dtc=bool(d.get("monitor_dtc", False)),
            create_ticket=bool(d.get("create_ticket", False)),
            notifications=[Notification.from_dict(n) for n in (d.get("notifications") or [])],
            backup_domain=d.get("backup_domain"),
            last_backup=parse_timestamp(d.get("last_backup")),
            reported_alerts=[str(a) for a in (d.get("reported_alerts") or [])],
            endpoints=d.get("endpoints"),
        )
