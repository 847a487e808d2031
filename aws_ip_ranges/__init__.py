"""Locally cached, filterable view of the AWS IP ranges dataset.

Usage:
    import anyio
    from aws_ip_ranges import query

    prefixes = anyio.run(query, "S3")
    prefixes = anyio.run(query, {"service": "EC2", "region": "us-east-1"})
"""

from .config import CacheConfig
from .errors import (
    CacheError,
    CacheUnavailableError,
    IPRangesError,
    NetworkError,
    PayloadError,
)
from .filters import Filter, apply_filter
from .models import CacheRecord
from .resolver import QueryResolver


async def query(filter: Filter = None, config: CacheConfig | None = None) -> list[str]:
    """Return matching prefixes, refreshing the cache file if it is stale."""
    return await QueryResolver(config).query(filter)


async def is_up_to_date(config: CacheConfig | None = None) -> bool:
    """Return True if the cache file matches the published dataset."""
    return await QueryResolver(config).is_up_to_date()


async def get_from_cache(filter: Filter = None, config: CacheConfig | None = None) -> list[str]:
    """Return matching prefixes from the cache file only."""
    return await QueryResolver(config).get_from_cache(filter)


async def delete_cache(config: CacheConfig | None = None) -> None:
    """Delete (or empty) the cache file."""
    await QueryResolver(config).delete_cache()


__all__ = [
    "CacheConfig",
    "CacheError",
    "CacheRecord",
    "CacheUnavailableError",
    "Filter",
    "IPRangesError",
    "NetworkError",
    "PayloadError",
    "QueryResolver",
    "apply_filter",
    "delete_cache",
    "get_from_cache",
    "is_up_to_date",
    "query",
]
