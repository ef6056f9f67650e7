from .classifiers import dtc_high_priority, ncsc_high_priority
from .feed import FeedItem, FeedItemError, FeedMonitor, Vulnerability, compress_items, new_items_since

__all__ = [
    "FeedItem",
    "FeedItemError",
    "FeedMonitor",
    "Vulnerability",
    "compress_items",
    "dtc_high_priority",
    "ncsc_high_priority",
    "new_items_since",
]
