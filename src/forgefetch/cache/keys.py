"""Cache key derivation."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ImmutableCacheKey:
    """Identity of a fetched tarball.

    Only the archive kind and the commit take part. Owner, repository, and
    host are left out, so two locators that resolve to the same commit share
    one entry.
    """

    kind: str
    rev: str

    def to_payload(self) -> dict[str, str]:
        return {"type": self.kind, "rev": self.rev}


def cache_key(key: ImmutableCacheKey) -> str:
    canonical = json.dumps(key.to_payload(), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
