from __future__ import annotations

import re

from saas_monitor.feeds.feed import FeedItem

DTC_HIGH_PRIORITY_TERMS = ("KRITIEK", "ERNSTIG", "ACTIEF MISBRUIK")

# "[probability/impact]", e.g. "NCSC-2024-0369 [1.01] [M/H] ..."
NCSC_RATING = re.compile(r"\[([HML])/([HM])\]")


def dtc_high_priority(item: FeedItem) -> bool:
    title = item.title.upper()
    return any(term in title for term in DTC_HIGH_PRIORITY_TERMS)


def ncsc_high_priority(item: FeedItem) -> bool:
    m = NCSC_RATING.search(item.title)
    if not m:
        return False
    probability, impact = m.group(1), m.group(2)
    return probability == "H" or impact == "H"
