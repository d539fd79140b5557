"""Simple file-based caching for provider responses."""

import hashlib
import json
import os
import tempfile
import time
from pathlib import Path

from src.config import Paths, SETTINGS
from src.utils.logger import setup_logger

logger = setup_logger("cache")


class DataCache:
    """File-based JSON cache with TTL support.

    A disabled cache never touches the filesystem: ``get`` always misses and
    ``set`` is a no-op. Unreadable entries count as misses and are removed.
    """

    def __init__(self, category: str = "general", enabled: bool | None = None,
                 cache_root: Path | None = None):
        cache_config = SETTINGS.get("cache", {})
        self.enabled = cache_config.get("enabled", True) if enabled is None else enabled
        self.cache_dir = (cache_root or Paths.DATA_CACHE) / category
        if self.enabled:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        ttl_config = cache_config.get("ttl_hours", {})
        self.ttl_seconds = ttl_config.get(category, 24) * 3600

    def _key_path(self, key: str) -> Path:
        hashed = hashlib.md5(key.encode()).hexdigest()
        return self.cache_dir / f"{hashed}.json"

    def get(self, key: str) -> dict | list | None:
        """Retrieve cached JSON data if not expired."""
        if not self.enabled:
            return None
        path = self._key_path(key)
        if not path.exists():
            return None
        if time.time() - path.stat().st_mtime > self.ttl_seconds:
            path.unlink(missing_ok=True)
            return None
        try:
            with open(path) as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Discarding unreadable cache entry %s: %s", path.name, e)
            path.unlink(missing_ok=True)
            return None

    def set(self, key: str, data: dict | list) -> None:
        """Store JSON data in cache; the entry appears only once fully written."""
        if not self.enabled:
            return
        path = self._key_path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
