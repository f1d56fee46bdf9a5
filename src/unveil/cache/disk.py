"""Gzip files on the local filesystem."""

import gzip
import os
import tempfile
import zlib
from pathlib import Path

import structlog


logger = structlog.get_logger()

GZIP_LEVEL = 3
ENTRY_SUFFIX = ".gz"


class DiskStorage:
    """One ``<cache_id>.gz`` file per entry under a cache directory."""

    def __init__(self, cache_dir: Path) -> None:
        """Initialize the storage, creating the directory if needed.

        Args:
            cache_dir: Directory holding the entries.
        """
        self._cache_dir = cache_dir
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        self._log = logger.bind(component="cache", backend="disk")

    @property
    def cache_dir(self) -> Path:
        """Directory holding the entries."""
        return self._cache_dir

    def path_for(self, cache_id: str) -> Path:
        """Get the file path of an entry."""
        return self._cache_dir / f"{cache_id}{ENTRY_SUFFIX}"

    def exists(self, cache_id: str) -> bool:
        return self.path_for(cache_id).is_file()

    def get(self, cache_id: str) -> bytes | None:
        path = self.path_for(cache_id)
        try:
            return gzip.decompress(path.read_bytes())
        except FileNotFoundError:
            return None
        except (OSError, EOFError, zlib.error) as e:
            self._log.warning("cache_read_failed", cache_id=cache_id, error=str(e))
            return None

    def set(self, cache_id: str, content: bytes) -> bool:
        """Write an entry atomically.

        The compressed payload goes to a temporary file in the same
        directory and is then renamed over the final path.
        """
        path = self.path_for(cache_id)
        payload = gzip.compress(content, compresslevel=GZIP_LEVEL)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self._cache_dir, suffix=".tmp")
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(payload)
            os.replace(tmp_name, path)
        except OSError as e:
            self._log.warning("cache_write_failed", cache_id=cache_id, error=str(e))
            return False
        return True

    def count(self) -> int:
        """Count entry files by scanning the directory."""
        return sum(1 for p in self._cache_dir.glob(f"*{ENTRY_SUFFIX}") if p.is_file())
