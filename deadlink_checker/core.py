"""
Core API for the Dead Link Checker

This module provides a high-level interface for canonicalizing URLs and
deciding whether the links they point to are dead.
"""

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from .check_links import LinkChecker, categorize_links
from .config import CheckerConfig
from .models import ALIVE, RESTRICTED, BLOCKED, SERVER_ERROR, CONNECTION_ERROR, LinkVerdict
from .urls import clean_url, parse_url, resolve_host_encoder, sanitize_url


@dataclass
class CheckSummary:
    """Summary of a batch check."""
    total_links: int
    dead_links: int
    alive_links: int
    restricted_links: int
    blocked_links: int
    server_error_links: int
    connection_errors: int
    processing_time: float
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_links': self.total_links,
            'dead_links': self.dead_links,
            'alive_links': self.alive_links,
            'restricted_links': self.restricted_links,
            'blocked_links': self.blocked_links,
            'server_error_links': self.server_error_links,
            'connection_errors': self.connection_errors,
            'processing_time_seconds': self.processing_time,
            'timestamp': self.timestamp.isoformat()
        }


def summarize(verdicts: Dict[str, LinkVerdict], processing_time: float = 0.0) -> CheckSummary:
    """Count verdicts by outcome."""
    categories = categorize_links(verdicts)
    return CheckSummary(
        total_links=len(verdicts),
        dead_links=sum(1 for verdict in verdicts.values() if verdict.dead),
        alive_links=len(categories[ALIVE]),
        restricted_links=len(categories[RESTRICTED]),
        blocked_links=len(categories[BLOCKED]),
        server_error_links=len(categories[SERVER_ERROR]),
        connection_errors=len(categories[CONNECTION_ERROR]),
        processing_time=processing_time,
        timestamp=datetime.now()
    )


def get_dead_links_only(verdicts: Dict[str, LinkVerdict]) -> List[LinkVerdict]:
    """Get only the verdicts for dead links, in input order."""
    return [verdict for verdict in verdicts.values() if verdict.dead]


class DeadLinkChecker:
    """
    High-level API for URL canonicalization and dead link detection.

    The IDN host encoder is resolved once, when the checker is created, and
    shared by ``sanitize_url`` and the probes.
    """

    def __init__(self, config: Optional[CheckerConfig] = None, session=None, host_encoder=None):
        """
        Initialize the dead link checker.

        Args:
            config: Configuration object. If None, uses default settings.
            session: Optional requests session to probe with.
            host_encoder: Optional IDN host encoder; resolved from the environment if None.
        """
        self.config = config or CheckerConfig()
        self.host_encoder = host_encoder or resolve_host_encoder()
        self.link_checker = LinkChecker(self.config, session=session, host_encoder=self.host_encoder)

    def close(self):
        self.link_checker.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def parse_url(self, url: str) -> Dict[str, Optional[str]]:
        return parse_url(url)

    def clean_url(self, url: str) -> str:
        return clean_url(url)

    def sanitize_url(self, url: str) -> str:
        return sanitize_url(url, self.host_encoder)

    def is_link_dead(self, url: str) -> bool:
        return self.link_checker.is_link_dead(url)

    def are_links_dead(self, urls: Sequence[str]) -> Dict[str, bool]:
        """
        Check many links at once.

        Returns:
            Mapping of each input URL to True if dead, in input order
        """
        return self.link_checker.are_links_dead(urls)

    def check_link(self, url: str) -> LinkVerdict:
        return self.link_checker.check_link(url)

    def check_links(self, urls: Sequence[str]) -> Dict[str, LinkVerdict]:
        return self.link_checker.check_links(urls)

    def check_links_with_summary(self, urls: Sequence[str]):
        """
        Check links and time the run.

        Returns:
            Tuple of (verdicts, CheckSummary)
        """
        start_time = time.time()
        verdicts = self.check_links(urls)
        return verdicts, summarize(verdicts, time.time() - start_time)


def is_link_dead(url: str, config: Optional[CheckerConfig] = None) -> bool:
    """Check one link with a throwaway checker."""
    with DeadLinkChecker(config) as checker:
        return checker.is_link_dead(url)


def are_links_dead(urls: Sequence[str], config: Optional[CheckerConfig] = None) -> Dict[str, bool]:
    """Check many links with a throwaway checker."""
    with DeadLinkChecker(config) as checker:
        return checker.are_links_dead(urls)
