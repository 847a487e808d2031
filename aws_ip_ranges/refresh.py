"""Download the dataset and persist it as a new cache record."""

import logging

import anyio.to_thread

from .config import CacheConfig
from .errors import CacheError
from .models import CacheRecord
from .remote import IPRangesClient
from .utilities.storage import CacheStorage

logger = logging.getLogger(__name__)


class RefreshExecutor:
    """Replaces the cache file with a freshly downloaded snapshot."""

    def __init__(self, config: CacheConfig, client: IPRangesClient, storage: CacheStorage):
        self.config = config
        self.client = client
        self.storage = storage

    async def refresh(self) -> CacheRecord:
        """
        Fetch the full dataset, persist it, and return the new record.

        A failed write is logged as a warning and the record is still
        returned, since the fetched data is valid even if it could not be
        cached.

        Raises:
            NetworkError: If the download fails
            PayloadError: If the downloaded document is malformed
        """
        entries = await self.client.fetch_entries()
        record = CacheRecord.create(entries)

        if self.config.debug:
            logger.debug("Writing new cache file %s", self.storage.path)
        try:
            await anyio.to_thread.run_sync(self.storage.write, record)
        except CacheError as e:
            logger.warning("Could not persist refreshed cache: %s", e)

        return record
