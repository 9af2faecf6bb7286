"""
Link liveness probing.

A link is probed once per check: HTTP(S) links with a HEAD request that falls
back to a streamed GET, FTP links with a SIZE/NLST/CWD lookup. The outcome is
mapped to a LinkVerdict by ``classify_status``.

Status classification:

    100-399                  alive
    401 402 403 407 429 451  alive (access restricted, the resource exists)
    other 4xx                dead
    5xx                      retried, then alive (server_error) if still failing
    anything else            dead
    network failure          dead (connection_error)
"""

import concurrent.futures
import ftplib
import logging
import socket
import threading
import time
import warnings
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import unquote

import requests
import urllib3
from requests.adapters import HTTPAdapter
from tqdm import tqdm
from urllib3.util.retry import Retry

from .config import CheckerConfig
from .models import (
    ALIVE, DEAD, RESTRICTED, BLOCKED, SERVER_ERROR, CONNECTION_ERROR, ALL_STATUSES,
    LinkVerdict
)
from .urls import DEFAULT_HOST_ENCODER, ParsedURL, parse_url_parts, sanitize_url

logger = logging.getLogger(__name__)

# The unverified TLS fallback would otherwise warn on every request
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
warnings.filterwarnings('ignore', message='Unverified HTTPS request')

RESTRICTED_STATUS_CODES = frozenset({401, 402, 403, 407, 429, 451})

HTTP_SCHEMES = ('http', 'https')
FTP_SCHEMES = ('ftp',)

DEFAULT_FTP_PORT = 21
# Most of a block page that is read when looking for bot-protection phrases
MAX_BLOCK_PAGE_BYTES = 64 * 1024
BLOCK_PAGE_CHUNK_SIZE = 8192


def classify_status(status_code: int) -> Tuple[bool, str]:
    """
    Map an HTTP status code to (dead, status).

    Args:
        status_code: Final status code after redirects

    Returns:
        Tuple of (dead, status) where status is one of the models statuses
    """
    if 100 <= status_code < 400:
        return False, ALIVE
    if status_code in RESTRICTED_STATUS_CODES:
        return False, RESTRICTED
    if 400 <= status_code < 500:
        return True, DEAD
    if 500 <= status_code < 600:
        return False, SERVER_ERROR
    return True, DEAD


def read_body_prefix(response: requests.Response, max_bytes: int = MAX_BLOCK_PAGE_BYTES,
                     max_seconds: Optional[float] = None) -> bytes:
    """
    Read at most ``max_bytes`` of a streamed body, giving up after ``max_seconds``.

    The read timeout only bounds the gap between chunks, so a server that keeps
    trickling data needs both limits.
    """
    deadline = time.monotonic() + max_seconds if max_seconds is not None else None
    body = b''
    for chunk in response.iter_content(chunk_size=BLOCK_PAGE_CHUNK_SIZE):
        body += chunk
        if len(body) >= max_bytes:
            break
        if deadline is not None and time.monotonic() >= deadline:
            break
    return body[:max_bytes]


def is_likely_bot_blocked(response: requests.Response, max_seconds: Optional[float] = None) -> bool:
    """Check if a 403 response is likely due to bot blocking."""
    bot_indicators = [
        'cloudflare', 'captcha', 'challenge', 'bot', 'automated',
        'rate limit', 'access denied', 'security', 'blocked'
    ]

    for header_name, header_value in response.headers.items():
        header_lower = f"{header_name}: {header_value}".lower()
        for indicator in bot_indicators:
            if indicator in header_lower:
                return True

    if response.request is None or response.request.method != 'GET':
        return False

    content_length = response.headers.get('Content-Length', '')
    if content_length.isdigit() and int(content_length) > MAX_BLOCK_PAGE_BYTES:
        return False

    try:
        body = read_body_prefix(response, max_seconds=max_seconds)
        content = body.decode(response.encoding or 'utf-8', errors='replace').lower()
    except (requests.RequestException, urllib3.exceptions.HTTPError, LookupError, OSError) as e:
        logger.debug(f"Could not read block page for {response.url}: {e}")
        return False

    blocking_phrases = [
        'access denied', 'forbidden', 'blocked', 'bot detected',
        'automated access', 'rate limit', 'captcha', 'challenge',
        'security check', 'cloudflare', 'ddos protection'
    ]
    return any(phrase in content for phrase in blocking_phrases)


def check_dns_resolution(host: str) -> bool:
    """Check if a host name can be resolved via DNS."""
    try:
        socket.getaddrinfo(host.strip('[]'), None)
        return True
    except (socket.gaierror, socket.herror, UnicodeError, ValueError):
        return False


def create_session(config: CheckerConfig) -> requests.Session:
    """Create a session with connection pooling sized for the worker pool."""
    session = requests.Session()
    session.headers.update(config.request_headers())
    session.max_redirects = config.max_redirects

    adapter = HTTPAdapter(
        pool_connections=20,
        pool_maxsize=config.max_connections,
        max_retries=Retry(
            total=config.connection_retries,
            read=False,
            backoff_factor=config.backoff_factor,
            raise_on_status=False
        )
    )
    session.mount('https://', adapter)
    session.mount('http://', adapter)

    return session


def _ftp_reply_code(error: Exception) -> Optional[int]:
    reply = str(error)[:3]
    return int(reply) if reply.isdigit() else None


class LinkChecker:
    """
    Probes links and classifies them as alive or dead.

    One checker can be shared between threads. ``max_connections`` bounds the
    number of probes in flight across every caller of the checker.
    """

    def __init__(self, config: Optional[CheckerConfig] = None,
                 session: Optional[requests.Session] = None,
                 host_encoder=None):
        """
        Initialize the checker.

        Args:
            config: Configuration object. If None, uses default settings.
            session: HTTP session to issue requests with. If None, one is created.
            host_encoder: IDN host encoder. If None, the environment default is used.
        """
        self.config = (config or CheckerConfig()).validate()
        self.session = session if session is not None else create_session(self.config)
        self.host_encoder = host_encoder or DEFAULT_HOST_ENCODER
        self._headers = self.config.request_headers()
        self._timeout = (self.config.connect_timeout, self.config.timeout)
        self._slots = threading.BoundedSemaphore(self.config.max_connections)

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def is_link_dead(self, url: str) -> bool:
        """Return True if the link is dead."""
        return self.check_link(url).dead

    def check_link(self, url: str) -> LinkVerdict:
        """
        Probe a single link.

        Never raises; transport failures come back as dead verdicts.
        """
        with self._slots:
            try:
                verdict = self._probe(url)
            except Exception as e:
                logger.exception(f"Unexpected error checking {url}")
                verdict = LinkVerdict(url=url, dead=True, status=CONNECTION_ERROR,
                                      error=type(e).__name__)
        verdict.url = url
        logger.debug(f"{url} -> {verdict.status} ({verdict.status_code or verdict.error})")
        return verdict

    def check_links(self, urls: Sequence[str]) -> Dict[str, LinkVerdict]:
        """
        Check links in parallel using ThreadPoolExecutor.

        The returned mapping follows the input order. Duplicate URLs are
        probed independently and share one key.
        """
        urls = list(urls)
        if not urls:
            return {}

        verdicts: List[Optional[LinkVerdict]] = [None] * len(urls)
        max_workers = min(self.config.max_workers, len(urls))

        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_index = {
                executor.submit(self.check_link, url): index
                for index, url in enumerate(urls)
            }

            with tqdm(total=len(urls), desc=f"Checking links ({max_workers} workers)",
                      unit="link", disable=not self.config.progress) as pbar:
                for future in concurrent.futures.as_completed(future_to_index):
                    index = future_to_index[future]
                    try:
                        verdicts[index] = future.result()
                    except Exception as e:
                        logger.error(f"Link check failed for {urls[index]}: {e}")
                        verdicts[index] = LinkVerdict(url=urls[index], dead=True,
                                                      status=CONNECTION_ERROR,
                                                      error=type(e).__name__)
                    pbar.update(1)

        results: Dict[str, LinkVerdict] = {}
        for url, verdict in zip(urls, verdicts):
            results[url] = verdict
        return results

    def are_links_dead(self, urls: Sequence[str]) -> Dict[str, bool]:
        """Vectorized is_link_dead."""
        return {url: verdict.dead for url, verdict in self.check_links(urls).items()}

    def _probe(self, url: str) -> LinkVerdict:
        checked_url = sanitize_url(url, self.host_encoder)
        parts = parse_url_parts(checked_url)
        scheme = (parts.scheme or '').lower()

        if scheme not in HTTP_SCHEMES + FTP_SCHEMES:
            verdict = self._failure('unsupported_scheme')
        elif not parts.host:
            verdict = self._failure('invalid_url')
        elif self._should_precheck_dns(checked_url, scheme) and not check_dns_resolution(parts.host):
            verdict = self._failure('dns')
        elif scheme in FTP_SCHEMES:
            verdict = self._probe_ftp(parts)
        else:
            verdict = self._probe_http(checked_url)

        verdict.checked_url = checked_url
        return verdict

    def _should_precheck_dns(self, url: str, scheme: str) -> bool:
        """
        Whether the host should be resolved locally before probing.

        Behind a proxy the proxy resolves names, so a local lookup could fail
        for a host that is reachable. FTP connects directly and is always
        checked. The lookup itself is not bounded by ``timeout``; it takes as
        long as the system resolver does.
        """
        if not self.config.dns_precheck:
            return False
        if scheme in FTP_SCHEMES:
            return True
        if getattr(self.session, 'proxies', None) or requests.utils.get_environ_proxies(url):
            logger.debug(f"Proxy configured for {url}, skipping DNS pre-check")
            return False
        return True

    def _failure(self, error: str, method: Optional[str] = None) -> LinkVerdict:
        return LinkVerdict(url='', dead=True, status=CONNECTION_ERROR, error=error, method=method)

    def _probe_http(self, url: str) -> LinkVerdict:
        if self.config.head_first:
            verdict = self._request('HEAD', url)
            if verdict.status == ALIVE:
                return verdict
            # Plenty of servers reject or mishandle HEAD; a GET is authoritative
            logger.debug(f"HEAD {url} gave {verdict.status}, retrying with GET")

        return self._request_with_retries('GET', url)

    def _request_with_retries(self, method: str, url: str) -> LinkVerdict:
        attempt = 0
        while True:
            verdict = self._request(method, url)
            if verdict.status != SERVER_ERROR or attempt >= self.config.server_error_retries:
                return verdict

            delay = self.config.backoff_factor * (2 ** attempt)
            logger.debug(f"{method} {url} returned {verdict.status_code}, retrying in {delay:.1f}s")
            time.sleep(delay)
            attempt += 1

    def _request(self, method: str, url: str, verify: Optional[bool] = None) -> LinkVerdict:
        if verify is None:
            verify = self.config.verify_tls

        try:
            response = self.session.request(
                method, url,
                headers=self._headers,
                timeout=self._timeout,
                allow_redirects=True,
                stream=True,
                verify=verify
            )
        except requests.exceptions.SSLError as e:
            if verify and self.config.tls_fallback:
                logger.debug(f"TLS verification failed for {url}, retrying unverified: {e}")
                return self._request(method, url, verify=False)
            return self._failure('tls', method)
        except requests.exceptions.TooManyRedirects:
            return LinkVerdict(url='', dead=True, status=DEAD, error='too_many_redirects',
                               method=method)
        except requests.exceptions.Timeout:
            return self._failure('timeout', method)
        except requests.exceptions.ConnectionError as e:
            logger.debug(f"{method} {url} failed: {e}")
            return self._failure('connection', method)
        except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema,
                requests.exceptions.InvalidSchema, urllib3.exceptions.LocationParseError):
            return self._failure('invalid_url', method)
        except requests.RequestException as e:
            logger.debug(f"{method} {url} failed: {e}")
            return self._failure('request', method)
        except (ValueError, UnicodeError):
            return self._failure('invalid_url', method)

        try:
            status_code = response.status_code
            dead, status = classify_status(status_code)
            if status_code == 403 and is_likely_bot_blocked(response, max_seconds=self.config.timeout):
                status = BLOCKED
            return LinkVerdict(
                url='',
                dead=dead,
                status=status,
                status_code=status_code,
                final_url=response.url,
                redirects=len(response.history),
                method=method
            )
        finally:
            response.close()

    def _probe_ftp(self, parts: ParsedURL) -> LinkVerdict:
        host = parts.host.strip('[]')
        port = int(parts.port) if parts.port else DEFAULT_FTP_PORT
        user, password = 'anonymous', 'anonymous@'
        if parts.userinfo:
            name, _, secret = parts.userinfo.partition(':')
            user = unquote(name)
            if secret:
                password = unquote(secret)
        path = unquote(parts.path) or '/'

        try:
            with ftplib.FTP(timeout=self.config.timeout) as ftp:
                ftp.connect(host, port, timeout=self.config.connect_timeout)
                # connect() leaves the control socket on the connect timeout
                ftp.timeout = self.config.timeout
                ftp.sock.settimeout(self.config.timeout)
                ftp.login(user, password)
                status_code = self._ftp_lookup(ftp, path)
        except ftplib.error_perm as e:
            return LinkVerdict(url='', dead=True, status=DEAD,
                               status_code=_ftp_reply_code(e), method='FTP')
        except ftplib.error_temp as e:
            return LinkVerdict(url='', dead=False, status=SERVER_ERROR,
                               status_code=_ftp_reply_code(e), method='FTP')
        except socket.timeout:
            return self._failure('timeout', 'FTP')
        except (OSError, EOFError, ftplib.Error) as e:
            logger.debug(f"FTP {host}{path} failed: {e}")
            return self._failure('connection', 'FTP')

        return LinkVerdict(url='', dead=False, status=ALIVE, status_code=status_code, method='FTP')

    def _ftp_lookup(self, ftp: ftplib.FTP, path: str) -> int:
        """
        Find ``path`` on a logged-in server and return the reply code proving it.

        SIZE answers for files. Servers that do not implement SIZE (500, 502,
        504) get an NLST of the path instead. CWD settles directories and is the
        last word: its error_perm propagates as the dead verdict.
        """
        try:
            ftp.voidcmd('TYPE I')
            ftp.size(path)
            return 213
        except ftplib.error_perm as e:
            size_unsupported = _ftp_reply_code(e) != 550

        if size_unsupported:
            try:
                if ftp.nlst(path):
                    return 226
            except (ftplib.error_perm, ftplib.error_temp, OSError, EOFError) as e:
                logger.debug(f"FTP NLST {path} failed: {e}")

        ftp.cwd(path)
        return 250


def categorize_links(verdicts: Dict[str, LinkVerdict]) -> Dict[str, List[LinkVerdict]]:
    """Categorize link verdicts by their status."""
    categories: Dict[str, List[LinkVerdict]] = {status: [] for status in ALL_STATUSES}
    for verdict in verdicts.values():
        categories[verdict.status].append(verdict)
    return categories


def print_link_summary(verdicts: Dict[str, LinkVerdict]) -> None:
    """Print a summary of link checking results."""
    if not verdicts:
        print("No links to check.")
        return

    categories = categorize_links(verdicts)
    dead = [verdict for verdict in verdicts.values() if verdict.dead]

    print(f"\n📊 Link Check Summary:")
    print(f"   Total links: {len(verdicts)}")
    print(f"   ✅ Alive: {len(categories[ALIVE])}")
    print(f"   🔒 Restricted: {len(categories[RESTRICTED])}")
    print(f"   🚫 Blocked (bot protection): {len(categories[BLOCKED])}")
    print(f"   ⚠️  Server errors: {len(categories[SERVER_ERROR])}")
    print(f"   ❌ Dead: {len(categories[DEAD])}")
    print(f"   🔌 Connection errors: {len(categories[CONNECTION_ERROR])}")

    if dead:
        print(f"\n❌ Dead links found:")
        for verdict in dead:
            reason = verdict.status_code if verdict.status_code is not None else verdict.error
            print(f"   - {verdict.url} ({reason})")
