from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Protocol

from saas_monitor.correlator import AlertPredicate, CorrelatorConfig, TypeKey, always, type_property_key
from saas_monitor.models import AlertRecord, IncidentFormatter, Tenant, default_detail, default_label


class VendorError(RuntimeError):
    pass


class VendorClient(Protocol):
    """Portal API of one vendor. Failures are raised as VendorError (or httpx.HTTPError)."""

    def list_tenants(self) -> List[Tenant]:
        ...

    def list_alerts(self, tenant: Tenant) -> List[AlertRecord]:
        ...


def severity_is_not(*severities: str) -> AlertPredicate:
    excluded = frozenset(severities)

    def predicate(alert: AlertRecord) -> bool:
        return alert.severity not in excluded

    return predicate


def severity_is(*severities: str) -> AlertPredicate:
    wanted = frozenset(severities)

    def predicate(alert: AlertRecord) -> bool:
        return alert.severity in wanted

    return predicate


@dataclass(frozen=True)
class VendorProfile:
    """Per vendor policy used by the Monitor."""
    source: str
    # config flag that selects the tenant; "monitoring" means any monitor flag
    monitor_flag: str = "monitor_backup"
    # config flag that enables incident reporting, defaults to monitor_flag
    report_flag: Optional[str] = None
    # alerts attached to endpoints
    collect: AlertPredicate = always
    # alerts that open or extend incidents
    qualifies: AlertPredicate = always
    type_key: TypeKey = type_property_key
    label: IncidentFormatter = default_label
    detail: IncidentFormatter = default_detail
    # store the tenant's endpoint count in the config entry
    count_endpoints: bool = False
    # non qualifying alerts remove their id from the reported list
    forget_resolved: bool = False

    def correlator_config(self) -> CorrelatorConfig:
        return CorrelatorConfig(
            source=self.source,
            qualifies=self.qualifies,
            type_key=self.type_key,
            label=self.label,
            detail=self.detail,
        )

    @staticmethod
    def _flag(cfg: Any, flag: str) -> bool:
        if flag == "monitoring":
            return bool(cfg.monitoring())
        return bool(getattr(cfg, flag))

    def monitors(self, cfg: Any) -> bool:
        return self._flag(cfg, self.monitor_flag)

    def reports(self, cfg: Any) -> bool:
        return self._flag(cfg, self.report_flag or self.monitor_flag)
