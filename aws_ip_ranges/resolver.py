"""Query orchestration: load, verify, refresh, filter."""

import logging
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

import anyio.to_thread
import httpx

from .config import CacheConfig
from .errors import (
    CacheError,
    CacheNotFoundError,
    CacheUnavailableError,
    IPRangesError,
    ResolutionError,
)
from .filters import Filter, apply_filter
from .freshness import FreshnessOracle
from .models import CacheRecord
from .refresh import RefreshExecutor
from .remote import IPRangesClient
from .utilities.storage import CacheStorage

logger = logging.getLogger(__name__)


class ResolverState(Enum):
    """Stages of the fallback chain."""

    LOADING = "loading"
    NO_RECORD = "no_record"
    LOADED = "loaded"
    STALE = "stale"
    REFRESHING = "refreshing"
    READY = "ready"


@dataclass
class Resolution:
    """Current state of a resolution and the record it carries, if any."""

    state: ResolverState
    record: CacheRecord | None = None


Stage = Callable[[Resolution], Awaitable[Resolution]]


class QueryResolver:
    """
    Serves filtered prefixes from the cache file, refreshing it when needed.

    Resolution is a state machine::

        LOADING ─> LOADED ────┬─> READY <─────────┐
           │                  │                   │
           └─> NO_RECORD ─────┴─> STALE ─> REFRESHING

    Each stage maps the current Resolution to the next one. Storage failures
    while LOADING become NO_RECORD, and a failed freshness check becomes
    STALE. Only the REFRESHING stage can raise.
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        client: IPRangesClient | None = None,
        storage: CacheStorage | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or CacheConfig()
        self.storage = storage or CacheStorage(self.config.cache_file, debug=self.config.debug)
        self.client = client or IPRangesClient(self.config, transport=transport)
        self.oracle = FreshnessOracle(self.config, self.client)
        self.refresher = RefreshExecutor(self.config, self.client, self.storage)

    def _debug(self, msg: str, *args) -> None:
        if self.config.debug:
            logger.debug(msg, *args)

    # =========================================================================
    # Public API
    # =========================================================================

    async def query(self, filter: Filter = None) -> list[str]:
        """
        Return matching prefixes, refreshing the cache if it is stale.

        Raises:
            NetworkError: If a refresh was needed and the download failed
            PayloadError: If a refresh was needed and the download was malformed
            TypeError: If the filter is not a str, mapping, or None
        """
        record = await self._resolve(os.R_OK | os.W_OK, allow_refresh=True)
        if record is None:
            raise ResolutionError("Fallback chain ended without a usable record")
        return apply_filter(record.entries, filter)

    async def is_up_to_date(self) -> bool:
        """Return True if the cache file exists and matches the remote dataset."""
        try:
            record = await self._resolve(os.R_OK, allow_refresh=False)
        except IPRangesError as e:
            self._debug("Freshness check failed: %s", e)
            return False
        return record is not None

    async def get_from_cache(self, filter: Filter = None) -> list[str]:
        """
        Return matching prefixes from the cache file without any network access.

        Raises:
            CacheUnavailableError: If the cache file is missing, unreadable or corrupt
        """
        try:
            record = await self._load(os.R_OK)
        except CacheError as e:
            self._debug("Cache-only read failed: %s", e)
            raise CacheUnavailableError("cache does not exist or is not readable") from e
        return apply_filter(record.entries, filter)

    async def delete_cache(self) -> None:
        """Delete the cache file, or empty it if it cannot be deleted."""
        status = await anyio.to_thread.run_sync(self.storage.delete)
        if status == "deleted":
            self._debug("Deleted cache file")
        elif status == "emptied":
            self._debug("Could not delete cache file - wrote empty one instead")

    # =========================================================================
    # Fallback chain
    # =========================================================================

    def _load_sync(self, mode: int) -> CacheRecord:
        if not self.storage.exists():
            raise CacheNotFoundError(f"Cache file does not exist: {self.storage.path}")
        self._debug("Cache file exists")
        self.storage.check_access(mode)
        self._debug("Cache file access check passed")
        return self.storage.read()

    async def _load(self, mode: int) -> CacheRecord:
        return await anyio.to_thread.run_sync(self._load_sync, mode)

    async def _resolve(self, mode: int, allow_refresh: bool) -> CacheRecord | None:
        """
        Run the fallback chain until no stage applies to the current state.

        Returns:
            The usable record, or None if it is stale and refresh is not allowed

        Raises:
            ResolutionError: If the chain stops in any state other than READY
                or an unrefreshable STALE
        """

        async def load(resolution: Resolution) -> Resolution:
            try:
                record = await self._load(mode)
            except CacheError as e:
                self._debug("No usable cache record: %s", e)
                return Resolution(ResolverState.NO_RECORD)
            return Resolution(ResolverState.LOADED, record)

        async def check(resolution: Resolution) -> Resolution:
            if await self.oracle.is_fresh(resolution.record):
                return Resolution(ResolverState.READY, resolution.record)
            return Resolution(ResolverState.STALE, resolution.record)

        async def mark_refreshing(resolution: Resolution) -> Resolution:
            self._debug("Refreshing cache from %s", self.config.url)
            return Resolution(ResolverState.REFRESHING)

        async def refresh(resolution: Resolution) -> Resolution:
            return Resolution(ResolverState.READY, await self.refresher.refresh())

        stages: dict[ResolverState, Stage] = {
            ResolverState.LOADING: load,
            ResolverState.NO_RECORD: check,
            ResolverState.LOADED: check,
        }
        if allow_refresh:
            stages[ResolverState.STALE] = mark_refreshing
            stages[ResolverState.REFRESHING] = refresh

        resolution = Resolution(ResolverState.LOADING)
        while resolution.state in stages:
            resolution = await stages[resolution.state](resolution)
            self._debug("Resolver state: %s", resolution.state.value)

        if resolution.state is ResolverState.READY and resolution.record is not None:
            return resolution.record
        if resolution.state is ResolverState.STALE and not allow_refresh:
            return None
        raise ResolutionError(f"Fallback chain stopped in state {resolution.state.value}")
