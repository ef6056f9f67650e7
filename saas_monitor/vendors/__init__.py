from types import MappingProxyType

from . import cloudally, integra365, skykick, sophos, veeam, zabbix
from .base import VendorClient, VendorError, VendorProfile

PROFILES = MappingProxyType(
    {
        m.SOURCE: m.PROFILE
        for m in (sophos, veeam, skykick, cloudally, integra365, zabbix)
    }
)

__all__ = ["PROFILES", "VendorClient", "VendorError", "VendorProfile"]
