from __future__ import annotations

import argparse
import logging
from typing import List, Mapping, Optional, Sequence

from saas_monitor.config.loader import load_yaml_list
from saas_monitor.config.settings import MonitorSettings
from saas_monitor.config.store import MonitoringConfig
from saas_monitor.feeds.sources import dtc_monitor, ncsc_monitor
from saas_monitor.matcher import match_companies
from saas_monitor.monitor import Monitor, sleep_pace
from saas_monitor.pipeline import MonitoringRun
from saas_monitor.sla.scheduler import SLAScheduler
from saas_monitor.ticketing import Ticketer, ZammadTicketer
from saas_monitor.vendors import PROFILES
from saas_monitor.vendors.base import VendorClient
from saas_monitor.watchdog import BackupTicketDesk, scan_backup_tickets, stale_backups

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="saas-monitor", description="Monitor SaaS vendor portals and advisory feeds")
    p.add_argument("-s", "--sla", action="store_true", help="write the customer configuration report and exit")
    p.add_argument("-c", "--compact", action="store_true", help="remove config entries of tenants no vendor reported")
    p.add_argument(
        "-n",
        "--notification",
        metavar="CUSTOMER,TASK,INTERVAL[,DATE]",
        help="add a customer notification and exit",
    )
    p.add_argument("-l", "--list-notifications", action="store_true", help="list all notifications and exit")
    p.add_argument(
        "-t",
        "--ticket-scan",
        action="store_true",
        help="process backup report tickets, warn about silent backups and exit",
    )
    p.add_argument(
        "-m",
        "--match-companies",
        metavar="FILE",
        help="match the company names in a YAML list file against the configuration and exit",
    )
    p.add_argument("--no-feeds", action="store_true", help="skip the DTC and NCSC advisory feeds")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return p


def build_monitors(
    config: MonitoringConfig, settings: MonitorSettings, clients: Mapping[str, VendorClient]
) -> List[Monitor]:
    monitors: List[Monitor] = []
    for source, client in clients.items():
        profile = PROFILES.get(source)
        if profile is None:
            logger.warning("No vendor profile for %s, client ignored", source)
            continue
        monitors.append(Monitor(client, profile, config, pace=sleep_pace(settings.tenant_delay)))
    return monitors


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    clients: Optional[Mapping[str, VendorClient]] = None,
    settings: Optional[MonitorSettings] = None,
    ticketer: Optional[Ticketer] = None,
    desk: Optional[BackupTicketDesk] = None,
) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    settings = settings or MonitorSettings.from_env()
    config = MonitoringConfig(settings.config_path)
    scheduler = SLAScheduler(config)

    if args.sla:
        config.report(settings.report_path)
        return 0

    if args.list_notifications:
        for line in scheduler.report_lines():
            print(line)
        return 0

    if args.notification:
        parts = [p.strip() for p in args.notification.split(",")]
        if len(parts) < 3:
            logger.error("--notification needs customer,task,interval[,date]")
            return 2
        date_string = parts[3] if len(parts) > 3 else None
        added = scheduler.add_notification(parts[0], parts[1], parts[2], date_string)
        return 0 if added else 1

    if args.match_companies:
        result = match_companies([str(c) for c in load_yaml_list(args.match_companies)], config)
        for company, cfg in result.matches.items():
            print(f"{company}: {cfg.description}")
        for company in result.nonmatches:
            print(f"* no match: {company}")
        return 0

    if args.ticket_scan:
        scan = scan_backup_tickets(desk or ZammadTicketer.from_settings(settings), config)
        logger.info(
            "Backup tickets: %d succeeded, %d failed, %d unknown, %d unmatched, %d ignored",
            len(scan.succeeded), len(scan.failed), len(scan.unknown), len(scan.unmatched), len(scan.ignored),
        )
        stale_backups(config)
        config.save_config()
        return 0

    feeds = []
    if not args.no_feeds:
        feeds = [dtc_monitor(config, settings), ncsc_monitor(config, settings)]

    run = MonitoringRun(
        config,
        ticketer or ZammadTicketer.from_settings(settings),
        monitors=build_monitors(config, settings, clients or {}),
        scheduler=scheduler,
        feeds=feeds,
        compact=args.compact,
    )
    result = run.run()
    return 1 if result.errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
