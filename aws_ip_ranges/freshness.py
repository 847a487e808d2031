"""Decide whether a cached record still matches the published dataset."""

import logging

from .config import CacheConfig
from .errors import MissingMetadataError, RemoteError
from .models import CacheRecord
from .remote import IPRangesClient
from .utilities.timestamps import is_not_after, utc_now

logger = logging.getLogger(__name__)


class FreshnessOracle:
    """
    Checks a record against the remote Last-Modified header.

    The check is a HEAD request, so confirming freshness never downloads the
    dataset itself. Every comparison goes through ``is_not_after`` so that a
    missing or invalid date always makes the record stale.
    """

    def __init__(self, config: CacheConfig, client: IPRangesClient):
        self.config = config
        self.client = client

    def _debug(self, msg: str, *args) -> None:
        if self.config.debug:
            logger.debug(msg, *args)

    async def is_fresh(self, record: CacheRecord | None) -> bool:
        """Return True if ``record`` is current. Never raises."""
        if record is None or record.produced_at is None:
            self._debug("Cache file does not contain a valid timestamp")
            return False

        cached_at = record.produced_at
        if not is_not_after(cached_at, utc_now()):
            self._debug("Cache timestamp %s is in the future, ignoring", record.timestamp)
            return False

        try:
            last_modified = await self.client.fetch_last_modified()
        except MissingMetadataError as e:
            self._debug("HEAD request did not have a usable Last-Modified header: %s", e)
            return False
        except RemoteError as e:
            self._debug("Freshness check failed: %s", e)
            return False
        except Exception as e:
            logger.warning("Unexpected error during freshness check: %s", e)
            return False

        if not is_not_after(last_modified, cached_at):
            self._debug("Cache is out of date (remote modified %s)", last_modified.isoformat())
            return False

        self._debug("Cache is up to date")
        return True
