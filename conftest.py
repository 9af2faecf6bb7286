"""
Shared fixtures: a scripted stand-in for requests.Session and response builders.
"""

import pytest
import requests

from deadlink_checker.config import CheckerConfig


def make_response(status_code, url, method='GET', history=0, headers=None, content=b''):
    """Build a requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.headers.update(headers or {})
    response._content = content
    response._content_consumed = True
    response.request = requests.Request(method, url).prepare()
    response.history = [requests.Response() for _ in range(history)]
    return response


class FakeSession:
    """
    Answers requests from a handler(method, url, kwargs).

    The handler returns a Response or an exception instance to raise.
    """

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        result = self.handler(method, url, kwargs)
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        pass


@pytest.fixture
def offline_config():
    return CheckerConfig(dns_precheck=False, backoff_factor=0.0, max_workers=4, max_connections=4)


@pytest.fixture
def no_sleep(monkeypatch):
    delays = []
    monkeypatch.setattr('deadlink_checker.check_links.time.sleep', delays.append)
    return delays
