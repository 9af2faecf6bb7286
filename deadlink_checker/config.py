"""
Configuration for link checking.
"""

from dataclasses import dataclass, field
from typing import Dict

# Constants
DEFAULT_USER_AGENT = 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
DEFAULT_HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
    'Accept-Encoding': 'gzip, deflate',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1'
}


@dataclass
class CheckerConfig:
    """Configuration for the dead link checker."""
    timeout: float = 10.0  # read timeout per request
    connect_timeout: float = 5.0
    max_redirects: int = 10
    server_error_retries: int = 1
    backoff_factor: float = 0.5
    connection_retries: int = 0
    max_workers: int = 30
    max_connections: int = 30
    head_first: bool = True
    dns_precheck: bool = True
    verify_tls: bool = True
    tls_fallback: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    headers: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))
    progress: bool = False
    verbose: bool = False

    def validate(self) -> 'CheckerConfig':
        """Raise ValueError for settings the checker cannot run with."""
        if self.timeout <= 0 or self.connect_timeout <= 0:
            raise ValueError("timeouts must be positive")
        if self.max_workers < 1 or self.max_connections < 1:
            raise ValueError("max_workers and max_connections must be at least 1")
        if self.max_redirects < 0:
            raise ValueError("max_redirects cannot be negative")
        if self.server_error_retries < 0 or self.connection_retries < 0:
            raise ValueError("retry counts cannot be negative")
        if self.backoff_factor < 0:
            raise ValueError("backoff_factor cannot be negative")
        return self

    def request_headers(self) -> Dict[str, str]:
        headers = dict(self.headers)
        headers['User-Agent'] = self.user_agent
        return headers
