#!/usr/bin/env python3
"""
Command-line interface for the Dead Link Checker

This module provides the CLI functionality, separated from the core library.
"""

import argparse
import sys
from typing import List, Optional

from .check_links import print_link_summary
from .config import CheckerConfig, DEFAULT_USER_AGENT
from .core import DeadLinkChecker
from .urls import clean_url, parse_url, sanitize_url
from .utils import format_duration, load_urls_from_file, set_logging_level


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(description='Check whether links are dead')

    # Input
    parser.add_argument('urls', nargs='*',
                       help='URLs to check')
    parser.add_argument('--file', type=str,
                       help='Read URLs from a file, one per line')

    # Canonicalization modes
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--clean', action='store_true',
                      help='Print the comparison key of each URL instead of checking it')
    mode.add_argument('--sanitize', action='store_true',
                      help='Print the sanitized form of each URL instead of checking it')
    mode.add_argument('--parse', action='store_true',
                      help='Print the scheme, host and path of each URL instead of checking it')

    # Request settings
    parser.add_argument('--timeout', type=float, default=10.0,
                       help='Read timeout in seconds (default: 10.0)')
    parser.add_argument('--connect-timeout', type=float, default=5.0,
                       help='Connect timeout in seconds (default: 5.0)')
    parser.add_argument('--max-redirects', type=int, default=10,
                       help='Maximum number of redirects to follow (default: 10)')
    parser.add_argument('--retries', type=int, default=1,
                       help='Retries for server errors (default: 1)')
    parser.add_argument('--backoff', type=float, default=0.5,
                       help='Backoff factor for retries in seconds (default: 0.5)')
    parser.add_argument('--no-head', action='store_false', dest='head_first',
                       help='Skip the HEAD request and always use GET (default: HEAD first)')
    parser.add_argument('--no-dns-check', action='store_false', dest='dns_precheck',
                       help='Skip the DNS lookup before requesting (default: check DNS)')
    parser.add_argument('--insecure', action='store_false', dest='verify_tls',
                       help='Do not verify TLS certificates (default: verify)')
    parser.add_argument('--no-tls-fallback', action='store_false', dest='tls_fallback',
                       help='Treat TLS verification failures as dead (default: retry unverified)')
    parser.add_argument('--user-agent', type=str, default=DEFAULT_USER_AGENT,
                       help='User-Agent header to send')

    # Performance settings
    parser.add_argument('--max-workers', type=int, default=30,
                       help='Maximum number of concurrent workers (default: 30)')

    # Output settings
    parser.add_argument('--csv', type=str,
                       help='Write a CSV report to this path')
    parser.add_argument('--progress', action='store_true',
                       help='Show a progress bar')
    parser.add_argument('--verbose', action='store_true', default=False,
                       help='Enable verbose output (default: False)')

    return parser


def create_config_from_args(args) -> CheckerConfig:
    """Create a CheckerConfig from parsed arguments."""
    return CheckerConfig(
        timeout=args.timeout,
        connect_timeout=args.connect_timeout,
        max_redirects=args.max_redirects,
        server_error_retries=args.retries,
        backoff_factor=args.backoff,
        max_workers=args.max_workers,
        max_connections=args.max_workers,
        head_first=args.head_first,
        dns_precheck=args.dns_precheck,
        verify_tls=args.verify_tls,
        tls_fallback=args.tls_fallback,
        user_agent=args.user_agent,
        progress=args.progress,
        verbose=args.verbose
    )


def print_startup_info(config: CheckerConfig, total: int):
    """Print startup information based on configuration."""
    print("🔍 Dead Link Checker")
    print("=" * 40)
    print(f"🔗 Checking {total} links with {config.max_workers} workers")
    print(f"⏱️  Timeout: {config.connect_timeout}s connect, {config.timeout}s read")
    print(f"↪️  Max redirects: {config.max_redirects}, server error retries: {config.server_error_retries}")
    print(f"📨 Method: {'HEAD then GET' if config.head_first else 'GET'}")
    if not config.verify_tls:
        print("🔓 TLS verification disabled")
    print()


def collect_urls(args) -> List[str]:
    urls = list(args.urls)
    if args.file:
        urls.extend(load_urls_from_file(args.file))
    return urls


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit status."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        urls = collect_urls(args)
    except OSError as e:
        parser.error(f"cannot read {args.file}: {e}")

    if not urls:
        parser.error("no URLs given")

    if args.clean:
        for url in urls:
            print(clean_url(url))
        return 0
    if args.sanitize:
        for url in urls:
            print(sanitize_url(url))
        return 0
    if args.parse:
        for url in urls:
            parts = parse_url(url)
            print(f"{parts['scheme'] or ''}\t{parts['host']}\t{parts['path']}")
        return 0

    try:
        config = create_config_from_args(args).validate()
    except ValueError as e:
        parser.error(str(e))

    set_logging_level(config.verbose)
    if config.verbose:
        print_startup_info(config, len(urls))

    try:
        with DeadLinkChecker(config) as checker:
            verdicts, summary = checker.check_links_with_summary(urls)
    except KeyboardInterrupt:
        print("\n⚠️  Processing interrupted by user.")
        return 130

    print_link_summary(verdicts)
    print(f"\n⏱️  Processing time: {format_duration(summary.processing_time)}")

    if args.csv:
        from .generate_report import create_csv_report
        csv_filepath = create_csv_report(verdicts, args.csv, verbose=config.verbose)
        print(f"📄 CSV report saved to: {csv_filepath}")

    return 1 if summary.dead_links else 0


if __name__ == "__main__":
    sys.exit(main())
