"""Access to the single on-disk cache file."""

import json
import logging
import os
import stat
import tempfile
from pathlib import Path

from ..errors import (
    CacheIOError,
    CacheNotFoundError,
    CacheParseError,
    CachePermissionError,
)
from ..models import CacheRecord

logger = logging.getLogger(__name__)


class CacheStorage:
    """
    Reads, writes and deletes the cache file at one fixed path.

    Every method works on the file directly; nothing is kept in memory
    between calls.
    """

    def __init__(self, path: Path | str, debug: bool = False):
        self.path = Path(path)
        self.debug = debug

    def _debug(self, msg: str, *args) -> None:
        if self.debug:
            logger.debug(msg, *args)

    def _target_mode(self) -> int:
        # Keep the existing file's permissions; new files get the umask default
        try:
            return stat.S_IMODE(os.stat(self.path).st_mode)
        except OSError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    def exists(self) -> bool:
        """Return True only if the path is a regular file.

        Any stat failure, including permission errors, counts as missing.
        """
        try:
            mode = os.stat(self.path).st_mode
        except OSError:
            return False
        return stat.S_ISREG(mode)

    def check_access(self, mode: int) -> None:
        """
        Verify permission on the cache file.

        Args:
            mode: Bitmask of os.R_OK and/or os.W_OK

        Raises:
            CachePermissionError: If the requested access is not granted
        """
        if not os.access(self.path, mode):
            raise CachePermissionError(f"Access check failed for {self.path} (mode={mode})")

    def read(self) -> CacheRecord:
        """
        Read and parse the cache file.

        Returns:
            The persisted CacheRecord

        Raises:
            CacheNotFoundError: If the file is gone
            CachePermissionError: If the file cannot be read
            CacheIOError: On any other filesystem error
            CacheParseError: If the content is empty, not JSON, or wrongly shaped
        """
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise CacheNotFoundError(f"Cache file not found: {self.path}") from e
        except PermissionError as e:
            raise CachePermissionError(f"Cannot read cache file {self.path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise CacheIOError(f"Error reading cache file {self.path}: {e}") from e

        try:
            data = json.loads(content)
        except (json.JSONDecodeError, RecursionError) as e:
            raise CacheParseError(f"Error parsing JSON from {self.path}: {e}") from e

        return CacheRecord.from_dict(data)

    def write(self, record: CacheRecord) -> None:
        """
        Atomically replace the cache file with the serialized record.

        The record is written to a temporary file in the same directory and
        renamed over the cache file, so readers see either the old or the new
        content and never a partial write.

        Raises:
            CacheIOError: If the file could not be written or renamed
        """
        tmp_path: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = Path(f.name)
                json.dump(record.to_dict(), f)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, self._target_mode())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise CacheIOError(f"Error writing cache file {self.path}: {e}") from e

        self._debug("Wrote %d entries to %s", len(record.entries), self.path)

    def delete(self) -> str:
        """
        Remove the cache file, or empty it if removal is not possible.

        An empty file is read back as unusable, so either outcome leaves the
        cache in the "no record" state.

        Returns:
            Status: "deleted", "emptied", or "error"
        """
        try:
            self.path.unlink()
            self._debug("Deleted cache file %s", self.path)
            return "deleted"
        except OSError as e:
            self._debug("Could not delete cache file %s: %s", self.path, e)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("", encoding="utf-8")
        except OSError as e:
            logger.error("Error emptying cache file %s: %s", self.path, e)
            return "error"

        self._debug("Wrote empty cache file %s instead", self.path)
        return "emptied"
