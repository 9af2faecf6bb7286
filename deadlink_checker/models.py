"""
Result types for link checks.
"""

from dataclasses import dataclass
from typing import Optional

# Verdict statuses
ALIVE = 'alive'
DEAD = 'dead'
RESTRICTED = 'restricted'
BLOCKED = 'blocked'
SERVER_ERROR = 'server_error'
CONNECTION_ERROR = 'connection_error'

ALL_STATUSES = (ALIVE, DEAD, RESTRICTED, BLOCKED, SERVER_ERROR, CONNECTION_ERROR)


@dataclass
class LinkVerdict:
    """Result of checking a single link."""
    url: str
    dead: bool
    status: str  # one of ALL_STATUSES
    status_code: Optional[int] = None
    error: Optional[str] = None  # network error class, e.g. 'dns', 'timeout', 'tls'
    final_url: Optional[str] = None  # where the redirect chain ended
    redirects: int = 0
    method: Optional[str] = None
    checked_url: Optional[str] = None  # the sanitized URL that was probed

    @property
    def alive(self) -> bool:
        return not self.dead

    def to_dict(self) -> dict:
        return {
            'url': self.url,
            'dead': self.dead,
            'status': self.status,
            'status_code': self.status_code,
            'error': self.error,
            'final_url': self.final_url,
            'redirects': self.redirects,
            'method': self.method,
            'checked_url': self.checked_url,
        }
