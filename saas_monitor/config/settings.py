from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{key} must be a number, got '{raw}'") from e


@dataclass(frozen=True)
class MonitorSettings:
    # Files, relative to the working directory by default
    config_path: str = "monitoring.yml"
    report_path: str = "configuration.md"
    cache_dir: str = "."
    cve_cache_path: str = "cve_scores.yml"

    # Pause between tenants of rate limited vendor APIs (seconds)
    tenant_delay: float = 0.05

    # Zammad
    zammad_host: Optional[str] = None
    zammad_token: Optional[str] = None
    zammad_group: Optional[str] = None
    zammad_customer: Optional[str] = None
    # backup tickets that need attention are moved here
    zammad_inbox_group: str = "Test"

    # MONITORING=DEBUG: log tickets instead of creating them
    debug: bool = False

    # HTTP
    http_timeout: float = 30.0

    @staticmethod
    def from_env(env: Optional[Mapping[str, str]] = None) -> "MonitorSettings":
        env = os.environ if env is None else env
        return MonitorSettings(
            config_path=env.get("MONITORING_CONFIG", "monitoring.yml"),
            report_path=env.get("MONITORING_REPORT", "configuration.md"),
            cache_dir=env.get("MONITORING_CACHE_DIR", "."),
            cve_cache_path=env.get("CVE_SCORE_CACHE", "cve_scores.yml"),
            tenant_delay=_env_float(env, "MONITORING_TENANT_DELAY", 0.05),
            zammad_host=env.get("ZAMMAD_HOST"),
            zammad_token=env.get("ZAMMAD_OAUTH_TOKEN"),
            zammad_group=env.get("ZAMMAD_GROUP"),
            zammad_customer=env.get("ZAMMAD_CUSTOMER"),
            zammad_inbox_group=env.get("INBOX_GROUP") or "Test",
            debug=env.get("MONITORING", "") == "DEBUG",
            http_timeout=_env_float(env, "MONITORING_HTTP_TIMEOUT", 30.0),
        )
