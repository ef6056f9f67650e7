from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import List, Optional, Union

import httpx

from saas_monitor.feeds.feed import FeedItem

logger = logging.getLogger(__name__)

USER_AGENT = "saas-monitor"


def _text(node: ET.Element, tag: str) -> Optional[str]:
    child = node.find(tag)
    if child is None or child.text is None:
        return None
    return child.text.strip()


def _pub_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        dt = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_rss(xml_text: Union[str, bytes]) -> List[FeedItem]:
    root = ET.fromstring(xml_text)
    items: List[FeedItem] = []
    for node in root.iter("item"):
        items.append(
            FeedItem(
                guid=_text(node, "guid"),
                link=_text(node, "link"),
                title=_text(node, "title") or "",
                published=_pub_date(_text(node, "pubDate")),
                description=_text(node, "description") or "",
            )
        )
    return items


class RssFetcher:
    def __init__(self, client: Optional[httpx.Client] = None, timeout: float = 30.0):
        self.client = client or httpx.Client(timeout=timeout, headers={"User-Agent": USER_AGENT})

    def __call__(self, url: str) -> List[FeedItem]:
        resp = self.client.get(url)
        resp.raise_for_status()
        items = parse_rss(resp.content)
        logger.debug("%s: %d items", url, len(items))
        return items
