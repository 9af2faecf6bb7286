#!/usr/bin/env python3
"""
Example: Using the Dead Link Checker as a Python Library

This script demonstrates how to use the tool programmatically instead of via CLI.
"""

from deadlink_checker import (
    CheckerConfig,
    DeadLinkChecker,
    clean_url,
    parse_url,
    sanitize_url
)


def example_canonicalization():
    """Canonical forms of URLs. No network access."""
    print("🔍 Example 1: URL Canonicalization")
    print("=" * 50)

    urls = [
        'https://www.google.com/',
        '//google.com?q=blah',
        'https://zh.wikipedia.org/wiki/猫',
        'http://кц.рф/ru/',
    ]
    for url in urls:
        print(f"{url}")
        print(f"   parsed:    {parse_url(url)}")
        print(f"   clean:     {clean_url(url)}")
        print(f"   sanitized: {sanitize_url(url)}")


def example_single_link():
    """Check one link with default settings."""
    print("\n🔍 Example 2: Single Link")
    print("=" * 50)

    with DeadLinkChecker() as checker:
        for url in ['https://en.wikipedia.org', 'https://en.wikipedia.org/nothing']:
            verdict = checker.check_link(url)
            print(f"{url}: {'dead' if verdict.dead else 'alive'} "
                  f"({verdict.status}, {verdict.status_code or verdict.error})")


def example_batch_with_custom_configuration():
    """Check a batch of links with a custom configuration."""
    print("\n🔍 Example 3: Batch with Custom Configuration")
    print("=" * 50)

    config = CheckerConfig(
        timeout=5.0,  # Shorter read timeout
        max_workers=10,  # Fewer concurrent probes
        server_error_retries=2,  # Be more patient with 5xx
        progress=True  # Show a progress bar
    )

    urls = [
        'https://en.wikipedia.org/wiki/Main_Page',
        'https://en.wikipedia.org/nothing',
        'ftp://ftp.rsa.com/pub/pkcs/ascii/layman.asc',
        'http://nonexistentdomain12345.com/',
    ]

    with DeadLinkChecker(config) as checker:
        verdicts, summary = checker.check_links_with_summary(urls)

    for url, verdict in verdicts.items():
        print(f"{'❌' if verdict.dead else '✅'} {url}")
    print(f"\n{summary.dead_links}/{summary.total_links} dead in {summary.processing_time:.1f}s")


if __name__ == "__main__":
    example_canonicalization()
    example_single_link()
    example_batch_with_custom_configuration()
