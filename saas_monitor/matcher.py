from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from saas_monitor.config.entry import ConfigEntry
from saas_monitor.config.store import MonitoringConfig

logger = logging.getLogger(__name__)

# documentation systems keep a placeholder company with this name
TEST_COMPANY = "test"


@dataclass
class CompanyMatch:
    matches: Dict[str, ConfigEntry] = field(default_factory=dict)
    nonmatches: List[str] = field(default_factory=list)


def partial_match(entries: Iterable[ConfigEntry], company_name: str) -> Optional[ConfigEntry]:
    name = company_name.lower()
    for e in entries:
        desc = e.description.lower()
        if name in desc or desc in name:
            return e
    return None


def match_companies(companies: Iterable[str], config: MonitoringConfig) -> CompanyMatch:
    """
    Pairs documentation company names with config entries: case-insensitive equality
    first, then a substring match either way.
    """
    result = CompanyMatch()
    for company in companies:
        entry = config.by_description(company)
        if entry is None and company.lower() != TEST_COMPANY:
            entry = partial_match(config.entries, company)
            if entry is not None:
                logger.info("Partial match found: %s / %s", company, entry.description)
                if entry.touched:
                    logger.warning("Duplicate match for %s", entry.description)
                entry.touch()

        if entry is not None:
            result.matches[company] = entry
        else:
            result.nonmatches.append(company)
    return result
