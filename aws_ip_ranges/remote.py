"""HTTP access to the published AWS IP ranges document."""

import json
import logging
from datetime import datetime

import httpx

from .config import REMOTE_ENTRIES_FIELD, CacheConfig
from .errors import MissingMetadataError, NetworkError, PayloadError
from .models import Entry
from .utilities.retry import ServerError, make_request_with_retry
from .utilities.timestamps import parse_http_date

logger = logging.getLogger(__name__)


class IPRangesClient:
    """
    Client for the remote dataset endpoint.

    Opens a fresh httpx.AsyncClient per request. Pass ``transport`` to route
    requests somewhere other than the network (e.g. httpx.MockTransport).
    """

    def __init__(
        self,
        config: CacheConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.transport = transport

    async def _request(self, method: str) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self.config.timeout,
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            try:
                response = await make_request_with_retry(
                    client,
                    self.config.url,
                    method=method,
                    max_attempts=self.config.max_attempts,
                    min_wait=self.config.min_wait,
                    max_wait=self.config.max_wait,
                )
            except (httpx.HTTPError, ServerError) as e:
                raise NetworkError(f"{method} {self.config.url} failed: {e}") from e

        if response.status_code != 200:
            raise NetworkError(
                f"{method} {self.config.url} returned HTTP {response.status_code}"
            )
        return response

    async def fetch_last_modified(self) -> datetime:
        """
        Issue a HEAD request and return the Last-Modified instant.

        Raises:
            NetworkError: If the request fails or returns a non-200 status
            MissingMetadataError: If the header is absent or unparseable
        """
        response = await self._request("HEAD")

        header = response.headers.get("last-modified")
        if not header:
            raise MissingMetadataError(f"HEAD {self.config.url} has no Last-Modified header")

        last_modified = parse_http_date(header)
        if last_modified is None:
            raise MissingMetadataError(f"Unparseable Last-Modified header: {header!r}")

        return last_modified

    async def fetch_entries(self) -> list[Entry]:
        """
        Download the full dataset and return its prefix records.

        Raises:
            NetworkError: If the request fails or returns a non-200 status
            PayloadError: If the body is not JSON or has no prefixes list
        """
        response = await self._request("GET")

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise PayloadError(f"Response from {self.config.url} is not JSON: {e}") from e

        if not isinstance(data, dict):
            raise PayloadError(f"Response from {self.config.url} is not a JSON object")

        entries = data.get(REMOTE_ENTRIES_FIELD)
        if not isinstance(entries, list):
            raise PayloadError(
                f"Response from {self.config.url} has no '{REMOTE_ENTRIES_FIELD}' list"
            )
        if not all(isinstance(entry, dict) for entry in entries):
            raise PayloadError(f"'{REMOTE_ENTRIES_FIELD}' must be a list of objects")

        if self.config.debug:
            logger.debug("Fetched %d entries from %s", len(entries), self.config.url)
        return entries
