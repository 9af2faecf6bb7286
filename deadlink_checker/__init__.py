"""
Dead Link Checker

A Python library for deciding whether the links cited by encyclopedia
articles are dead, and for producing canonical, comparable forms of URLs.
"""

from .config import CheckerConfig
from .models import LinkVerdict
from .urls import (
    ParsedURL,
    parse_url,
    parse_url_parts,
    clean_url,
    sanitize_url,
    resolve_host_encoder
)
from .check_links import LinkChecker, classify_status
from .core import DeadLinkChecker, CheckSummary, is_link_dead, are_links_dead
from .utils import format_duration

__version__ = "1.0.0"
__author__ = "Dead Link Checker Contributors"

__all__ = [
    "CheckerConfig",
    "LinkVerdict",
    "ParsedURL",
    "parse_url",
    "parse_url_parts",
    "clean_url",
    "sanitize_url",
    "resolve_host_encoder",
    "LinkChecker",
    "classify_status",
    "DeadLinkChecker",
    "CheckSummary",
    "is_link_dead",
    "are_links_dead",
    "format_duration"
]
