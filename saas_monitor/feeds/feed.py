from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import yaml

from saas_monitor.cache import PersistentCache
from saas_monitor.config.loader import load_yaml_list

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class FeedItemError(ValueError):
    pass


@dataclass
class FeedItem:
    guid: Optional[str]
    link: Optional[str]
    title: str
    published: Optional[datetime]
    description: str = ""


ItemPredicate = Callable[[FeedItem], bool]


def never(_item: FeedItem) -> bool:
    return False


def always(_item: FeedItem) -> bool:
    return True


@dataclass
class Vulnerability:
    item: FeedItem
    companies: List[Any] = field(default_factory=list)
    high_priority: bool = False

    @property
    def title(self) -> str:
        return self.item.title

    @property
    def description(self) -> str:
        companies_list = "\n- ".join(c.description for c in self.companies)
        return (
            f"{self.item.title}\n{self.item.link}\n\n"
            "*** Controleer de klanten met een SLA en onderneem aktie binnen 72 uur (3 werkdagen)\n"
            f"- {companies_list}"
        )


def validate_item(item: FeedItem) -> FeedItem:
    if not item.link:
        raise FeedItemError(f"Feed item without link: '{item.title}'")
    if item.published is None:
        raise FeedItemError(f"Feed item without publish date: {item.link}")
    return item


def compress_items(items: Iterable[FeedItem]) -> Dict[str, FeedItem]:
    """Items keyed by link; among duplicates the latest published one is kept."""
    result: Dict[str, FeedItem] = {}
    for item in sorted(items, key=lambda i: i.published or EPOCH):
        result[item.link or ""] = item
    return result


def new_items_since(
    items: Iterable[FeedItem],
    since: datetime,
    seen_ids: Iterable[str],
    *,
    classify: ItemPredicate = never,
    report_item: ItemPredicate = always,
    companies: Sequence[Any] = (),
) -> Tuple[List[Vulnerability], List[str]]:
    """
    Vulnerabilities for items not seen before and published after `since`.

    Every unseen item is added to the returned seen list, also when it is too old or the
    report filter rejects it, so it is never evaluated again. Items without link or
    publish date are skipped.
    """
    valid: List[FeedItem] = []
    for item in items:
        try:
            valid.append(validate_item(item))
        except FeedItemError as e:
            logger.warning("%s", e)

    seen: List[str] = list(seen_ids)
    seen_set: Set[str] = set(seen)
    vulnerabilities: List[Vulnerability] = []

    for link, item in compress_items(valid).items():
        if link in seen_set:
            continue
        seen.append(link)
        seen_set.add(link)
        if item.published > since and report_item(item):
            vulnerabilities.append(Vulnerability(item, list(companies), classify(item)))
    return vulnerabilities, seen


FetchItems = Callable[[str], List[FeedItem]]


class FeedMonitor:
    """
    One advisory feed and the list of links already handled for it.

    The seen list lives in monitor-<source>-alerts.yml; its modification time is the
    default `since` for the next poll.
    """

    def __init__(
        self,
        source: str,
        url: str,
        config: Any,
        fetch_items: FetchItems,
        *,
        classify: ItemPredicate = never,
        report_item: ItemPredicate = always,
        cache_dir: str = ".",
        caches: Sequence[PersistentCache] = (),
    ):
        self.source = source
        self.url = url
        self.config = config
        self.fetch_items = fetch_items
        self.classify = classify
        self.report_item = report_item
        self.cache_dir = cache_dir
        self.caches = list(caches)

        self.last_time = EPOCH
        path = self.cache_path
        if os.path.isfile(path):
            self.last_time = datetime.fromtimestamp(os.path.getmtime(path), tz=timezone.utc)
        self.seen: List[str] = [str(s) for s in load_yaml_list(path)]

    @property
    def cache_path(self) -> str:
        return os.path.join(self.cache_dir, f"monitor-{self.source.lower()}-alerts.yml")

    def companies(self) -> List[Any]:
        return [e for e in self.config.entries if e.monitor_dtc]

    def get_vulnerabilities(self, since: Optional[datetime] = None) -> List[Vulnerability]:
        since = since or self.last_time
        items = self.fetch_items(self.url)
        vulnerabilities, self.seen = new_items_since(
            items,
            since,
            self.seen,
            classify=self.classify,
            report_item=self.report_item,
            companies=self.companies(),
        )
        self.update_cache()
        logger.info("%s: %d new of %d feed items", self.source, len(vulnerabilities), len(items))
        return vulnerabilities

    def update_cache(self) -> None:
        for c in self.caches:
            c.persist()
        with open(self.cache_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.seen, f)
