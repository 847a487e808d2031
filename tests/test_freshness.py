"""Tests for the freshness check."""

from datetime import datetime, timedelta, timezone

import pytest

from aws_ip_ranges.freshness import FreshnessOracle
from aws_ip_ranges.models import CacheRecord
from aws_ip_ranges.remote import IPRangesClient

pytestmark = pytest.mark.anyio

# Either side of the fixture Last-Modified (Sun, 19 Oct 2025 04:43:14 GMT)
FRESH_TIMESTAMP = "2025-10-19T05:00:00Z"
STALE_TIMESTAMP = "2025-10-18T00:00:00Z"


@pytest.fixture
def oracle(config, endpoint):
    return FreshnessOracle(config, IPRangesClient(config, transport=endpoint.transport))


async def test_fresh_record(oracle, endpoint):
    """Test that a record newer than Last-Modified is fresh."""
    record = CacheRecord(timestamp=FRESH_TIMESTAMP, entries=[])

    assert await oracle.is_fresh(record) is True
    assert endpoint.requests == ["HEAD"]


async def test_record_at_exact_last_modified_is_fresh(oracle):
    """Test the inclusive boundary."""
    record = CacheRecord(timestamp="2025-10-19T04:43:14Z", entries=[])

    assert await oracle.is_fresh(record) is True


async def test_stale_record(oracle):
    """Test that a record older than Last-Modified is stale."""
    record = CacheRecord(timestamp=STALE_TIMESTAMP, entries=[])

    assert await oracle.is_fresh(record) is False


async def test_missing_record_skips_request(config, offline_client):
    """Test that no record means stale, with no network request."""
    oracle = FreshnessOracle(config, offline_client)

    assert await oracle.is_fresh(None) is False


@pytest.mark.parametrize("timestamp", [None, "", "garbage", 1760850000])
async def test_invalid_timestamp_skips_request(config, offline_client, timestamp):
    """Test that invalid timestamps are rejected before any request."""
    oracle = FreshnessOracle(config, offline_client)

    assert await oracle.is_fresh(CacheRecord(timestamp=timestamp, entries=[])) is False


async def test_future_timestamp_is_rejected(config, offline_client):
    """Test that future-dated records are stale regardless of the remote."""
    future = (datetime.now(timezone.utc) + timedelta(days=1)).strftime("%Y-%m-%dT%H:%M:%SZ")
    oracle = FreshnessOracle(config, offline_client)

    assert await oracle.is_fresh(CacheRecord(timestamp=future, entries=[])) is False


async def test_missing_last_modified_is_stale(oracle, endpoint):
    """Test that a HEAD response without Last-Modified makes the record stale."""
    endpoint.head_headers = {}

    assert await oracle.is_fresh(CacheRecord(timestamp=FRESH_TIMESTAMP, entries=[])) is False


async def test_head_failure_is_stale(oracle, endpoint):
    """Test that a failing HEAD request makes the record stale instead of raising."""
    endpoint.head_status = 500

    assert await oracle.is_fresh(CacheRecord(timestamp=FRESH_TIMESTAMP, entries=[])) is False


async def test_out_of_range_last_modified_is_stale(oracle, endpoint):
    """Test that a Last-Modified year beyond datetime's range makes the record stale."""
    endpoint.head_headers = {"last-modified": "Mon, 01 Jan 99999999999999999999 00:00:00 GMT"}

    assert await oracle.is_fresh(CacheRecord(timestamp=FRESH_TIMESTAMP, entries=[])) is False


async def test_unexpected_client_error_is_stale(config, caplog):
    """Test that an unexpected exception from the client is logged, not raised."""

    class BrokenClient:
        async def fetch_last_modified(self):
            raise RuntimeError("boom")

    oracle = FreshnessOracle(config, BrokenClient())

    assert await oracle.is_fresh(CacheRecord(timestamp=FRESH_TIMESTAMP, entries=[])) is False
    assert "boom" in caplog.text
