"""
Caching utilities for the sensitivity backend.

Small JSON documents stored on disk, one file per key. Used as the durable
key-value store behind the optimization ramp (first-use timestamps), so a
restart of the API does not restart every session's calibration.

The root directory comes from SENSITIVITY_CACHE_DIR (default: backend/cache).
"""

import json
import hashlib
import os
import time
from pathlib import Path
from typing import Any

# Cache root lives alongside the backend package unless overridden
CACHE_DIR = Path(
    os.getenv("SENSITIVITY_CACHE_DIR")
    or Path(__file__).resolve().parent.parent / "cache"
)


def _ensure_dir(subdir: str) -> Path:
    """Create cache subdirectory if it doesn't exist and return its Path."""
    path = Path(CACHE_DIR) / subdir
    path.mkdir(parents=True, exist_ok=True)
    return path


def _cache_key(prefix: str, **kwargs: Any) -> str:
    """
    Build a deterministic filename from arbitrary keyword args.
    Example: prefix="optimization", session="abc123"
    -> optimization_<md5>.json
    """
    raw = json.dumps(kwargs, sort_keys=True)
    digest = hashlib.md5(raw.encode()).hexdigest()[:12]
    return f"{prefix}_{digest}.json"


def _cache_path(subdir: str, **kwargs: Any) -> Path:
    return _ensure_dir(subdir) / _cache_key(subdir, **kwargs)


def read_cache(subdir: str, ttl_seconds: int | None = None, **kwargs: Any) -> dict | None:
    """Return cached dict or None if cache miss.

    If *ttl_seconds* is given, treat entries older than that as expired
    (return None so the caller recomputes). Without it entries never expire.
    Raises OSError / ValueError if the file exists but cannot be read or parsed.
    """
    filepath = _cache_path(subdir, **kwargs)
    if filepath.exists():
        if ttl_seconds is not None:
            if time.time() - filepath.stat().st_mtime > ttl_seconds:
                return None
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    return None


def write_cache(subdir: str, data: dict, **kwargs: Any) -> Path:
    """Write data to cache and return the file path."""
    filepath = _cache_path(subdir, **kwargs)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return filepath


def delete_cache(subdir: str, **kwargs: Any) -> bool:
    """Remove a cache entry. Returns True if something was deleted."""
    filepath = _cache_path(subdir, **kwargs)
    if filepath.exists():
        filepath.unlink()
        return True
    return False
