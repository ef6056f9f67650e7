from __future__ import annotations

import os
from typing import Any, Optional

import httpx

from saas_monitor.cache import PersistentCache
from saas_monitor.config.settings import MonitorSettings
from saas_monitor.feeds.classifiers import dtc_high_priority, ncsc_high_priority
from saas_monitor.feeds.feed import FeedMonitor
from saas_monitor.feeds.ncsc import CVEScoreCache, NCSCClient, NCSCReportFilter
from saas_monitor.feeds.rss import RssFetcher

DTC_FEED_URL = "https://www.digitaltrustcenter.nl/rss-cyberalerts.xml"
NCSC_FEED_URL = "https://advisories.ncsc.nl/rss/advisories"


def dtc_monitor(config: Any, settings: MonitorSettings, client: Optional[httpx.Client] = None) -> FeedMonitor:
    return FeedMonitor(
        "DTC",
        DTC_FEED_URL,
        config,
        RssFetcher(client, timeout=settings.http_timeout),
        classify=dtc_high_priority,
        cache_dir=settings.cache_dir,
    )


def ncsc_monitor(config: Any, settings: MonitorSettings, client: Optional[httpx.Client] = None) -> FeedMonitor:
    ncsc = NCSCClient(client, timeout=settings.http_timeout)
    scores = CVEScoreCache(ncsc, PersistentCache(os.path.join(settings.cache_dir, settings.cve_cache_path)))
    return FeedMonitor(
        "NCSC",
        NCSC_FEED_URL,
        config,
        RssFetcher(client, timeout=settings.http_timeout),
        classify=ncsc_high_priority,
        report_item=NCSCReportFilter(ncsc, scores),
        cache_dir=settings.cache_dir,
        caches=[scores.cache],
    )
