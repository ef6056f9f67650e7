from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, DefaultDict, Dict, List, Optional

from saas_monitor.fields import get_path


@dataclass
class Endpoint:
    id: str
    type: str
    hostname: str
    tenant_id: Optional[str] = None
    status: Optional[str] = None
    raw_data: Optional[Dict[str, Any]] = None
    alerts: List["AlertRecord"] = field(default_factory=list)
    incident_alerts: List["AlertRecord"] = field(default_factory=list)

    def clear_alerts(self) -> None:
        self.alerts = []
        self.incident_alerts = []

    def property(self, path: str) -> str:
        return get_path(self.raw_data, path)

    def __str__(self) -> str:
        return f"{self.type} {self.hostname}"


EndpointFactory = Callable[["AlertRecord"], Endpoint]


def default_endpoint_factory(alert: "AlertRecord") -> Endpoint:
    return Endpoint(
        id=alert.endpoint_id,
        type=alert.category or "",
        hostname=alert.endpoint_type or "",
        tenant_id=alert.tenant_id,
    )


@dataclass
class AlertRecord:
    id: str
    created: datetime
    description: str
    severity: str
    category: Optional[str]
    product: Optional[str]
    endpoint_id: str
    endpoint_type: Optional[str]
    tenant_id: Optional[str] = None
    raw_data: Optional[Dict[str, Any]] = None
    endpoint_factory: Optional[EndpointFactory] = field(default=None, repr=False, compare=False)

    def property(self, path: str) -> str:
        return get_path(self.raw_data, path)

    def create_endpoint(self) -> Endpoint:
        factory = self.endpoint_factory or default_endpoint_factory
        return factory(self)


@dataclass
class Tenant:
    id: str
    description: str
    endpoints: Dict[str, Endpoint] = field(default_factory=dict)
    alerts: List[AlertRecord] = field(default_factory=list)
    trial: bool = False


IncidentFormatter = Callable[["Incident"], str]


def default_label(incident: "Incident") -> str:
    return str(incident.device)


def default_detail(incident: "Incident") -> str:
    return (
        f"  {incident.time_to_s()}: {incident.source} {incident.alert.severity} alert\n"
        f"   Description: {incident.alert.description}\n"
    )


@dataclass
class Incident:
    source: str
    device: Any
    start_time: datetime
    end_time: datetime
    alert: AlertRecord
    label: IncidentFormatter = field(default=default_label, repr=False, compare=False)
    detail: IncidentFormatter = field(default=default_detail, repr=False, compare=False)

    @property
    def incident_id(self) -> str:
        return f"{self.source}-{self.alert.id}"

    def time_to_s(self) -> str:
        if self.start_time == self.end_time:
            return str(self.start_time)
        return f"{self.start_time} - {self.end_time}"

    def endpoint_to_s(self) -> str:
        return self.label(self)

    def __str__(self) -> str:
        return self.detail(self)


def _device_map() -> DefaultDict[str, Dict[str, Incident]]:
    return defaultdict(dict)


@dataclass
class CustomerAlerts:
    """
    Per tenant result of one collection cycle.
    devices: endpoint id -> alert type key -> the single live Incident for that pair.
    """
    name: str
    alerts: List[AlertRecord] = field(default_factory=list)
    devices: DefaultDict[str, Dict[str, Incident]] = field(default_factory=_device_map)
    source: str = "Unknown"
    customer: Optional[Tenant] = None

    def incidents(self) -> List[Incident]:
        return [i for incidents in self.devices.values() for i in incidents.values()]

    def report(self) -> Optional[str]:
        if not self.devices:
            return None
        rpt = f"Klant: {self.name}\n"
        for device_id, incidents in self.devices.items():
            if not incidents:
                continue
            first = next(iter(incidents.values()))
            rpt += f"- {first.endpoint_to_s()} ({device_id})\n"
            for incident in incidents.values():
                rpt += str(incident) + "\n"
        return rpt
