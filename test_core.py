"""
Tests for the high-level API and CSV reports.

Tests marked ``network`` reach real hosts and only run when
DEADLINK_NETWORK_TESTS=1 is set.
"""

import os

import polars as pl
import pytest

from conftest import FakeSession, make_response
from deadlink_checker import (
    CheckerConfig,
    DeadLinkChecker,
    are_links_dead,
    clean_url,
    is_link_dead,
    parse_url,
    sanitize_url,
)
from deadlink_checker.core import get_dead_links_only, summarize
from deadlink_checker.generate_report import create_csv_report, verdicts_to_dataframe
from deadlink_checker.models import ALIVE, CONNECTION_ERROR, DEAD, RESTRICTED, LinkVerdict
from deadlink_checker.urls import NullHostEncoder

network = pytest.mark.skipif(
    os.environ.get('DEADLINK_NETWORK_TESTS') != '1',
    reason="set DEADLINK_NETWORK_TESTS=1 to run tests against real hosts"
)


def wikipedia_handler(method, url, kwargs):
    code = 404 if url.endswith('/nothing') else 200
    return make_response(code, url, method=method)


@pytest.fixture
def checker(offline_config):
    with DeadLinkChecker(offline_config, session=FakeSession(wikipedia_handler)) as checker:
        yield checker


def test_facade_canonicalization(checker):
    assert checker.clean_url('https://www.google.com/') == 'google.com'
    assert checker.sanitize_url('//google.com?q=blah') == 'https://google.com/?q=blah'
    assert checker.parse_url('http://www.discogs.com/Various-Kad-Jeknu-Dragačevske-Trube-2') == {
        'scheme': 'http',
        'host': 'www.discogs.com',
        'path': '/Various-Kad-Jeknu-Dragačevske-Trube-2',
    }


def test_facade_liveness(checker):
    assert checker.is_link_dead('https://en.wikipedia.org') is False
    assert checker.is_link_dead('https://en.wikipedia.org/nothing') is True
    assert checker.is_link_dead('//en.wikipedia.org/nothing') is True


def test_facade_batch(checker):
    result = checker.are_links_dead([
        'https://en.wikipedia.org/wiki/Main_Page',
        'https://en.wikipedia.org/nothing',
    ])
    assert list(result.values()) == [False, True]


def test_injected_host_encoder_is_shared(offline_config):
    session = FakeSession(wikipedia_handler)
    checker = DeadLinkChecker(offline_config, session=session, host_encoder=NullHostEncoder())

    assert checker.sanitize_url('http://кц.рф/ru/') == 'http://кц.рф/ru/'
    assert checker.link_checker.host_encoder is checker.host_encoder


def test_check_links_with_summary(checker):
    verdicts, summary = checker.check_links_with_summary([
        'https://en.wikipedia.org/wiki/Main_Page',
        'https://en.wikipedia.org/nothing',
        'mailto:someone@example.com',
    ])

    assert summary.total_links == 3
    assert summary.dead_links == 2
    assert summary.alive_links == 1
    assert summary.connection_errors == 1
    assert summary.processing_time >= 0
    assert summary.to_dict()['total_links'] == 3
    assert [v.url for v in get_dead_links_only(verdicts)] == [
        'https://en.wikipedia.org/nothing',
        'mailto:someone@example.com',
    ]


def test_summarize_counts_restricted():
    verdicts = {
        'a': LinkVerdict(url='a', dead=False, status=RESTRICTED, status_code=403),
        'b': LinkVerdict(url='b', dead=False, status=ALIVE, status_code=200),
    }
    summary = summarize(verdicts, 1.5)
    assert summary.restricted_links == 1
    assert summary.alive_links == 1
    assert summary.dead_links == 0
    assert summary.processing_time == 1.5


def test_verdicts_to_dataframe():
    verdicts = {
        'https://www.example.com/a': LinkVerdict(url='https://www.example.com/a', dead=False,
                                                 status=ALIVE, status_code=200, method='HEAD'),
        'https://example.com/b': LinkVerdict(url='https://example.com/b', dead=True,
                                             status=CONNECTION_ERROR, error='dns'),
    }
    df = verdicts_to_dataframe(verdicts, timestamp='2024-01-01T00:00:00')

    assert df.height == 2
    assert df['url'].to_list() == list(verdicts)
    assert df['clean_url'].to_list() == ['example.com/a', 'example.com/b']
    assert df['dead'].to_list() == [False, True]
    assert df['status_code'].to_list() == [200, None]


def test_create_csv_report(tmp_path):
    verdicts = {
        'https://example.com/x': LinkVerdict(url='https://example.com/x', dead=True,
                                             status=DEAD, status_code=404),
    }
    path = create_csv_report(verdicts, str(tmp_path / 'out' / 'report.csv'))

    df = pl.read_csv(path)
    assert df['url'].to_list() == ['https://example.com/x']
    assert df['status_code'].to_list() == [404]


def test_module_level_helpers(monkeypatch):
    monkeypatch.setattr('deadlink_checker.check_links.create_session',
                        lambda config: FakeSession(wikipedia_handler))
    config = CheckerConfig(dns_precheck=False)

    assert is_link_dead('https://en.wikipedia.org/nothing', config) is True
    assert are_links_dead(['https://en.wikipedia.org/wiki/Main_Page'], config) == {
        'https://en.wikipedia.org/wiki/Main_Page': False
    }


def test_package_exports():
    assert clean_url('//google.com') == 'google.com'
    assert sanitize_url('//google.com') == 'https://google.com/'
    assert parse_url('//google.com')['scheme'] is None


# ---------------------------------------------------------------------------
# Real network
# ---------------------------------------------------------------------------

@network
def test_live_wikipedia_is_alive():
    assert is_link_dead('https://en.wikipedia.org') is False


@network
def test_live_missing_page_is_dead():
    assert is_link_dead('https://en.wikipedia.org/nothing') is True


@network
def test_live_batch():
    result = are_links_dead([
        'https://en.wikipedia.org/wiki/Main_Page',
        'https://en.wikipedia.org/nothing',
    ])
    assert list(result.values()) == [False, True]
