"""
URL parsing and canonicalization.

Three views of a URL are provided:

- ``parse_url`` gives the raw scheme, host and path exactly as written.
- ``clean_url`` gives a comparison key (no scheme, no ``www.``, no fragment)
  used to deduplicate links.
- ``sanitize_url`` gives a URL that can be handed to an HTTP client: it always
  has a scheme, an ASCII host and a percent-encoded path.

None of these raise on malformed input; unparseable parts come back empty.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)

try:
    import idna
    IDNA_AVAILABLE = True
except ImportError:
    IDNA_AVAILABLE = False
    logger.debug("idna not available, internationalized hosts will not be converted")


# RFC 3986 appendix B. Every string matches.
_URL_PATTERN = re.compile(
    r'^(?:(?P<scheme>[A-Za-z][A-Za-z0-9+.\-]*):)?'
    r'(?://(?P<authority>[^/?#]*))?'
    r'(?P<path>[^?#]*)'
    r'(?:\?(?P<query>[^#]*))?'
    r'(?:#(?P<fragment>.*))?$',
    re.DOTALL
)

_NON_ASCII = re.compile(r'[^\x00-\x7f]+')

# Schemes that always carry an authority component.
HIERARCHICAL_SCHEMES = ('http', 'https', 'ftp', 'ftps')

DEFAULT_SCHEME = 'https'


@dataclass(frozen=True)
class ParsedURL:
    """The components of a URL. ``None`` means the component was absent."""
    scheme: Optional[str]
    host: str
    path: str
    query: Optional[str] = None
    fragment: Optional[str] = None
    userinfo: Optional[str] = None
    port: Optional[str] = None


class NullHostEncoder:
    """Host encoder used when no IDN transform is installed. Leaves hosts alone."""

    available = False

    def encode(self, host: str) -> str:
        return host


class IdnaHostEncoder:
    """Converts internationalized host names to their ``xn--`` form."""

    available = True

    def encode(self, host: str) -> str:
        try:
            return idna.encode(host, uts46=True).decode('ascii')
        except (UnicodeError, ValueError) as e:
            # Not a valid IDN; the probe will fail on it instead
            logger.debug(f"Could not IDNA-encode host {host!r}: {e}")
            return host


def resolve_host_encoder():
    """Pick the host encoder supported by the running environment."""
    if IDNA_AVAILABLE:
        return IdnaHostEncoder()
    return NullHostEncoder()


DEFAULT_HOST_ENCODER = resolve_host_encoder()


def _split_authority(authority: str):
    """Split ``user@host:port`` into its three parts."""
    userinfo = None
    if '@' in authority:
        userinfo, _, authority = authority.rpartition('@')

    port = None
    if authority.startswith('['):
        # IPv6 literal
        end = authority.find(']')
        if end != -1:
            rest = authority[end + 1:]
            if rest.startswith(':') and rest[1:].isdigit():
                port = rest[1:]
                authority = authority[:end + 1]
    else:
        head, sep, tail = authority.rpartition(':')
        if sep and tail.isdigit():
            authority, port = head, tail

    return userinfo, authority, port


def _looks_like_bare_host(match) -> bool:
    """True for scheme-less input such as ``www.example.com/page`` or ``example.com:8080``."""
    scheme = match.group('scheme')
    if match.group('authority') is not None:
        return False
    if scheme is not None:
        # "example.com:8080/x" parses as scheme "example.com"
        return '.' in scheme
    path = match.group('path')
    if not path or path.startswith('/'):
        return False
    first_segment = path.split('/', 1)[0]
    return '.' in first_segment and ' ' not in first_segment


def parse_url_parts(url) -> ParsedURL:
    """
    Split a URL into its components.

    Accepts absolute, protocol-relative (``//host/path``) and scheme-less
    (``host/path``) URLs. Never raises.

    Args:
        url: Raw URL text

    Returns:
        ParsedURL with the host in its original (possibly Unicode) form
    """
    text = str(url).strip() if url is not None else ''

    match = _URL_PATTERN.match(text)
    if _looks_like_bare_host(match):
        match = _URL_PATTERN.match('//' + text)

    userinfo, host, port = None, '', None
    authority = match.group('authority')
    if authority is not None:
        userinfo, host, port = _split_authority(authority)

    return ParsedURL(
        scheme=match.group('scheme'),
        host=host,
        path=match.group('path'),
        query=match.group('query'),
        fragment=match.group('fragment'),
        userinfo=userinfo,
        port=port
    )


def parse_url(url) -> Dict[str, Optional[str]]:
    """
    Return the scheme, host and path of a URL without any sanitizing.

    The host keeps its Unicode form; call ``sanitize_url`` for the ASCII form.
    """
    parts = parse_url_parts(url)
    return {
        'scheme': parts.scheme,
        'host': parts.host,
        'path': parts.path,
    }


def clean_url(url) -> str:
    """
    Build a comparison key for a URL.

    The scheme, any leading ``www.`` labels, userinfo, the fragment and any
    trailing slash are dropped; the host is lower-cased; the query is kept.

    >>> clean_url('https://www.google.com/')
    'google.com'
    >>> clean_url('http://google.com?q=blah')
    'google.com?q=blah'
    """
    parts = parse_url_parts(url)

    host = parts.host.lower()
    while host.startswith('www.'):
        host = host[4:]
    if parts.port:
        host = f"{host}:{parts.port}"

    key = host + parts.path.rstrip('/')
    if parts.query is not None:
        key = f"{key}?{parts.query}"
    return key


def quote_non_ascii(path: str) -> str:
    """Percent-encode non-ASCII characters, leaving everything else (including %XX) alone."""
    return _NON_ASCII.sub(lambda m: quote(m.group(0), safe='', errors='replace'), path)


def sanitize_url(url, host_encoder=None) -> str:
    """
    Turn arbitrary URL text into a fetchable URL.

    - A missing scheme becomes ``https``; an existing one is kept as written.
    - Internationalized hosts are converted with ``host_encoder``
      (IDNA when installed).
    - Non-ASCII path characters are percent-encoded as UTF-8.
    - Query and fragment are passed through untouched.

    >>> sanitize_url('//google.com?q=blah')
    'https://google.com/?q=blah'
    """
    encoder = host_encoder or DEFAULT_HOST_ENCODER
    parts = parse_url_parts(url)
    scheme = parts.scheme or DEFAULT_SCHEME

    path = quote_non_ascii(parts.path)

    if parts.host or parts.scheme is None or scheme.lower() in HIERARCHICAL_SCHEMES:
        host = parts.host
        if not host.isascii():
            host = encoder.encode(host)
        netloc = host
        if parts.port is not None:
            netloc = f"{netloc}:{parts.port}"
        if parts.userinfo is not None:
            netloc = f"{parts.userinfo}@{netloc}"
        if host and not path:
            path = '/'
        result = f"{scheme}://{netloc}{path}"
    else:
        # mailto:, urn: and friends have no authority
        result = f"{scheme}:{path}"

    if parts.query is not None:
        result = f"{result}?{parts.query}"
    if parts.fragment is not None:
        result = f"{result}#{parts.fragment}"
    return result
