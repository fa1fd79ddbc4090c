"""Fetch cache keyed by immutable identity, with manifest verification."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

from forgefetch.cache.keys import ImmutableCacheKey, cache_key
from forgefetch.errors import ReproducibilityError
from forgefetch.models import CacheEntry


class FetchCache(Protocol):
    def lookup(self, key: ImmutableCacheKey) -> CacheEntry | None:
        """Return the entry for ``key``, or ``None`` on a miss."""

    def add(self, key: ImmutableCacheKey, entry: CacheEntry) -> None:
        """Record ``entry`` under ``key``; re-adding the same entry is a no-op."""


class FileCache:
    """One JSON manifest per key, written atomically."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def lookup(self, key: ImmutableCacheKey) -> CacheEntry | None:
        digest = cache_key(key)
        manifest_path = self.root / f"{digest}.json"
        if not manifest_path.exists():
            return None

        manifest = self._read_manifest(manifest_path)
        if manifest.get("key") != key.to_payload():
            raise ReproducibilityError(
                "Cache manifest key does not match the requested key.",
                hint="Delete the cache entry and refetch.",
                context={"operation": "cache_lookup", "path": str(manifest_path)},
            )
        info = manifest.get("info")
        store_path = manifest.get("store_path")
        if (
            not isinstance(info, dict)
            or not isinstance(info.get("lastModified"), int)
            or info.get("rev") != key.rev
            or not isinstance(store_path, str)
        ):
            raise ReproducibilityError(
                "Cache manifest has invalid structure.",
                hint="Delete the cache entry and refetch.",
                context={"operation": "cache_lookup", "path": str(manifest_path)},
            )
        tree_path = Path(store_path)
        if not tree_path.exists():
            # The tree was garbage collected; treat as a miss.
            return None
        return CacheEntry(
            rev=key.rev,
            last_modified=info["lastModified"],
            store_path=tree_path,
            nar_hash=str(info.get("narHash", "")),
        )

    def add(self, key: ImmutableCacheKey, entry: CacheEntry) -> None:
        digest = cache_key(key)
        manifest_path = self.root / f"{digest}.json"
        manifest = {
            "key": key.to_payload(),
            "info": {
                "rev": entry.rev,
                "lastModified": entry.last_modified,
                "narHash": entry.nar_hash,
            },
            "store_path": str(entry.store_path),
        }
        fd, temp_name = tempfile.mkstemp(dir=self.root, prefix=f"{digest}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(json.dumps(manifest, indent=2, sort_keys=True) + "\n")
            os.replace(temp_name, manifest_path)
        except OSError:
            Path(temp_name).unlink(missing_ok=True)
            raise

    def _read_manifest(self, path: Path) -> dict[str, object]:
        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ReproducibilityError(
                "Cache manifest is not valid JSON.",
                hint="Delete the cache entry and refetch.",
                context={"operation": "cache_lookup", "path": str(path)},
            ) from exc
        if not isinstance(parsed, dict):
            raise ReproducibilityError(
                "Cache manifest has invalid structure.",
                hint="Delete the cache entry and refetch.",
                context={"operation": "cache_lookup", "path": str(path)},
            )
        return parsed
