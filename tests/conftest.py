"""Shared pytest fixtures and configuration."""

import json
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from aws_ip_ranges.config import CacheConfig
from aws_ip_ranges.resolver import QueryResolver
from aws_ip_ranges.utilities.retry import make_request_with_retry as original_make_request

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Newer than the Last-Modified header in fixtures/ip-ranges-headers.txt
FRESH_TIMESTAMP = "2025-10-19T05:00:00Z"


def load_fixture_headers(fixture_name):
    """Load HTTP headers from fixture file."""
    headers = {}
    headers_file = FIXTURES_DIR / f"{fixture_name}-headers.txt"
    with open(headers_file) as f:
        for line in f:
            if ":" in line:
                key, value = line.split(":", 1)
                headers[key.strip()] = value.strip()
    return headers


class FakeEndpoint:
    """Stands in for ip-ranges.amazonaws.com behind an httpx.MockTransport."""

    def __init__(self, payload):
        self.payload = payload
        self.head_headers = load_fixture_headers("ip-ranges")
        self.head_status = 200
        self.get_status = 200
        self.get_body: bytes | None = None
        self.requests: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request.method)
        if request.method == "HEAD":
            return httpx.Response(self.head_status, headers=self.head_headers)
        if self.get_body is not None:
            return httpx.Response(self.get_status, content=self.get_body)
        return httpx.Response(self.get_status, json=self.payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def count(self, method: str) -> int:
        return self.requests.count(method)


class OfflineClient:
    """Remote client that fails the test if it is ever used."""

    async def fetch_last_modified(self):
        pytest.fail("Unexpected HEAD request to the remote dataset")

    async def fetch_entries(self):
        pytest.fail("Unexpected GET request to the remote dataset")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def fast_retries():
    """Disable retry wait times in all tests for speed."""

    async def fast_request(
        client, url, method="GET", headers=None, max_attempts=3, min_wait=1, max_wait=10
    ):
        # Always use min_wait=0 in tests to skip delays
        return await original_make_request(
            client,
            url,
            method=method,
            headers=headers,
            max_attempts=max_attempts,
            min_wait=0,
            max_wait=0,
        )

    with patch("aws_ip_ranges.remote.make_request_with_retry", fast_request):
        yield


@pytest.fixture
def dataset():
    """The fixture ip-ranges.json document."""
    return json.loads((FIXTURES_DIR / "ip-ranges.json").read_text())


@pytest.fixture
def endpoint(dataset):
    return FakeEndpoint(dataset)


@pytest.fixture
def cache_file(tmp_path):
    return tmp_path / "cache" / "ip-ranges.json"


@pytest.fixture
def config(cache_file):
    return CacheConfig(cache_file=cache_file, debug=True)


@pytest.fixture
def resolver(config, endpoint):
    return QueryResolver(config, transport=endpoint.transport)


@pytest.fixture
def offline_client():
    return OfflineClient()


@pytest.fixture
def offline_resolver(config, offline_client):
    return QueryResolver(config, client=offline_client)


@pytest.fixture
def write_cache(cache_file, dataset):
    """Write a cache document; entries default to the fixture prefixes."""

    def _write(timestamp=FRESH_TIMESTAMP, entries=None, raw=None):
        cache_file.parent.mkdir(parents=True, exist_ok=True)
        if raw is not None:
            cache_file.write_text(raw)
        else:
            document = {
                "timestamp": timestamp,
                "entries": dataset["prefixes"] if entries is None else entries,
            }
            cache_file.write_text(json.dumps(document))
        return cache_file

    return _write
