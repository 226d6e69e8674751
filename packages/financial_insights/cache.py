"""Parse-result caches for file imports.

Re-importing the same file should not re-parse it. Caches are passed
explicitly to :func:`financial_insights.ingest.utils.load_transactions_from_file`;
nothing here is process-global, so every caller (and every test) owns its
cache.

This module provides:

- ``ParseCache``: the protocol both implementations satisfy.
- ``compute_file_key``: a stable key from a file's identity (resolved path,
  size, modification time).
- ``InMemoryParseCache``: dict-backed, lives as long as the instance.
- ``DiskParseCache``: JSON files under a cache root.

Disk layout (relative to the cache root, default: ``./.cache``)::

    <cache_root>/parse/<key>.json

Atomicity: writes target ``.tmp`` first and then ``os.replace`` into place.
"""

from __future__ import annotations

import contextlib
import hashlib
import json
import os
import re
from collections.abc import Sequence
from os import PathLike
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from .ctv import CanonicalTransaction
from .logging_setup import get_logger
from .models import CachedTransaction, ParseCacheFile

# Bump only when the on-disk JSON shape changes.
SCHEMA_VERSION: int = 1

_KEY_RE = re.compile(r"^[a-f0-9]{64}$")


_logger = get_logger("financial_insights.cache")


class ParseCache(Protocol):
    def get(self, key: str) -> list[CanonicalTransaction] | None: ...

    def set(self, key: str, transactions: Sequence[CanonicalTransaction]) -> None: ...

    def clear(self) -> None: ...


def compute_file_key(path: str | PathLike[str]) -> str:
    """Return a sha256 hex key identifying ``path`` by name, size and mtime.

    Editing or replacing the file changes its size or modification time and
    therefore rolls the key.
    """

    p = Path(path).resolve()
    st = p.stat()
    payload = {"path": os.fspath(p), "size": st.st_size, "mtime_ns": st.st_mtime_ns}
    data = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


class InMemoryParseCache:
    """Per-instance dict cache."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[CanonicalTransaction, ...]] = {}

    def get(self, key: str) -> list[CanonicalTransaction] | None:
        hit = self._entries.get(key)
        return list(hit) if hit is not None else None

    def set(self, key: str, transactions: Sequence[CanonicalTransaction]) -> None:
        self._entries[key] = tuple(transactions)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def _get_cache_root() -> Path:
    """Return the cache root directory.

    Default: ``./.cache`` under the current working directory.
    Override: ``FI_CACHE_DIR`` environment variable (absolute or relative).
    """

    root = os.getenv("FI_CACHE_DIR")
    if root and root.strip():
        return Path(root).expanduser().resolve()
    return (Path.cwd() / ".cache").resolve()


def _validate_key(key: str) -> str:
    """Ensure the key is a sha256 hexdigest so it is safe as a file name."""

    if not _KEY_RE.fullmatch(key):
        raise ValueError("Invalid cache key: must be 64-char lowercase hex. Use compute_file_key().")
    return key


class DiskParseCache:
    """JSON-file cache of normalized imports.

    Unreadable, corrupt or stale-schema files are treated as misses so the
    caller falls back to parsing.
    """

    def __init__(self, root: str | PathLike[str] | None = None) -> None:
        base = Path(root).expanduser().resolve() if root is not None else _get_cache_root()
        self._dir = base / "parse"

    @property
    def directory(self) -> Path:
        return self._dir

    def _path(self, key: str) -> Path:
        return self._dir / f"{_validate_key(key)}.json"

    def get(self, key: str) -> list[CanonicalTransaction] | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            parsed = ParseCacheFile.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError):
            _logger.debug(
                "parse_cache:read_failed; falling back to parse key=%s path=%s",
                key,
                os.fspath(path),
                exc_info=True,
            )
            return None
        if parsed.schema_version != SCHEMA_VERSION or parsed.key != key:
            return None
        return [item.to_ctv() for item in parsed.transactions]

    def set(self, key: str, transactions: Sequence[CanonicalTransaction]) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")

        doc = ParseCacheFile(
            schema_version=SCHEMA_VERSION,
            key=key,
            transactions=[CachedTransaction.from_ctv(tx) for tx in transactions],
        )

        try:
            tmp.write_text(
                json.dumps(doc.model_dump(mode="json"), ensure_ascii=False, separators=(",", ":")),
                encoding="utf-8",
            )
            os.replace(tmp, path)
        except Exception:
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
            raise

    def clear(self) -> None:
        if not self._dir.exists():
            return
        for entry in self._dir.glob("*.json"):
            with contextlib.suppress(FileNotFoundError):
                entry.unlink()


__all__ = [
    "SCHEMA_VERSION",
    "DiskParseCache",
    "InMemoryParseCache",
    "ParseCache",
    "compute_file_key",
]
