from __future__ import annotations

import logging
import re
from typing import Any, List, Mapping, Optional

import httpx

from saas_monitor.cache import PersistentCache
from saas_monitor.feeds.feed import FeedItem

logger = logging.getLogger(__name__)

ADVISORY_ID = re.compile(r"id=(NCSC-\d{4}-\d{4})")
CVE_ID = re.compile(r"CVE-\d{4}-\d{4,5}")
PGP_BODY = re.compile(r"-----BEGIN PGP SIGNED MESSAGE-----(.*?)-----BEGIN PGP SIGNATURE-----", re.DOTALL)

ADVISORY_URL = "https://advisories.ncsc.nl/advisory?id={id}&format=plain"
CVE_URL = "https://cveawg.mitre.org/api/cve/{id}"

# CVSS 9.0 and up is "critical"
CRITICAL_SCORE = 9.0


def advisory_id(link: Optional[str]) -> Optional[str]:
    if not link:
        return None
    m = ADVISORY_ID.search(link)
    return m.group(1) if m else None


def strip_pgp(text: Optional[str]) -> str:
    if text is None:
        return ""
    m = PGP_BODY.search(text)
    return m.group(1).strip() if m else text


def parse_cve_ids(text: Optional[str]) -> List[str]:
    if not text:
        return []
    seen: List[str] = []
    for cve in CVE_ID.findall(text):
        if cve not in seen:
            seen.append(cve)
    return seen


def extract_highest_cvss_score(data: Optional[Mapping[str, Any]]) -> float:
    """
    Highest baseScore over containers.cna.metrics[*].<cvss version>, or -1 when the
    record carries no scores.
    """
    if not data:
        return -1
    cna = (data.get("containers") or {}).get("cna") or {}
    metrics = cna.get("metrics") or []
    scores: List[float] = []
    for metric in metrics:
        if not isinstance(metric, Mapping):
            continue
        for v in metric.values():
            if isinstance(v, Mapping) and v.get("baseScore") is not None:
                scores.append(float(v["baseScore"]))
    return max(scores) if scores else -1


class NCSCClient:
    """Plain text NCSC advisories and MITRE CVE records."""

    def __init__(self, client: Optional[httpx.Client] = None, timeout: float = 30.0):
        self.client = client or httpx.Client(
            timeout=timeout,
            headers={"User-Agent": "saas-monitor", "From": "info@monitoring.ncsc"},
        )

    def advisory_text(self, adv_id: str) -> str:
        url = ADVISORY_URL.format(id=adv_id.upper())
        try:
            resp = self.client.get(url)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Failed to fetch advisory %s: %s", adv_id, e)
            return ""
        return strip_pgp(resp.text)

    def cve_score(self, cve_id: str) -> Optional[float]:
        """None when the CVE record is not public (reserved id) or unreachable."""
        url = CVE_URL.format(id=cve_id.upper())
        try:
            resp = self.client.get(url)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Failed to fetch CVE data %s: %s", cve_id, e)
            return None
        try:
            data = resp.json()
        except ValueError as e:
            logger.warning("JSON parsing error for %s: %s", cve_id, e)
            data = {}
        return extract_highest_cvss_score(data)


class CVEScoreCache:
    def __init__(self, client: NCSCClient, cache: PersistentCache):
        self.client = client
        self.cache = cache

    def cve_score(self, cve_id: str) -> Optional[float]:
        if not cve_id or not cve_id.strip():
            raise ValueError("No CVE ID given")
        key = cve_id.strip().upper()
        score = self.cache.fetch(key)
        if score is None:
            score = self.client.cve_score(key)
            # unscored and reserved ids are looked up again next run
            if score is not None and score != -1:
                self.cache.store(key, score)
        return score

    def persist(self) -> bool:
        return self.cache.persist()


class NCSCReportFilter:
    """Reports an advisory only when one of its CVEs scores at least `threshold`."""

    def __init__(self, client: NCSCClient, scores: CVEScoreCache, threshold: float = CRITICAL_SCORE):
        self.client = client
        self.scores = scores
        self.threshold = threshold

    def highest_score(self, item: FeedItem) -> float:
        adv_id = advisory_id(item.link)
        if adv_id is None:
            logger.warning("No advisory id in %s", item.link)
            return -1
        best = -1.0
        for cve_id in parse_cve_ids(self.client.advisory_text(adv_id)):
            score = self.scores.cve_score(cve_id)
            if score is not None and score > best:
                best = score
        return best

    def __call__(self, item: FeedItem) -> bool:
        return self.highest_score(item) >= self.threshold
