"""Fetch orchestration: resolve, consult the immutable cache, download on a miss."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from forgefetch.cache import FetchCache, FileCache, ImmutableCacheKey
from forgefetch.errors import MalformedLocatorError, ReproducibilityError, ValidationError
from forgefetch.models import DEFAULT_REF, CacheEntry, Input, Tree, apply_overrides
from forgefetch.observability import StructuredLogger
from forgefetch.policy import Policy, enforce_mutable_ref_policy, ensure_network_allowed
from forgefetch.registry import SchemeRegistry, default_registry
from forgefetch.schemes import GitArchiveScheme
from forgefetch.settings import Settings
from forgefetch.store import TarballStore, TreeStore
from forgefetch.transport import Transport, UrllibTransport


class Fetcher:
    """Turns forge inputs into fully pinned inputs plus materialized trees.

    The algorithm is the same for every scheme; schemes only contribute
    endpoint shapes. A returned input always has ``rev`` and
    ``last_modified`` set and never a ``ref``.
    """

    def __init__(
        self,
        *,
        registry: SchemeRegistry,
        cache: FetchCache,
        store: TreeStore,
        transport: Transport,
        policy: Policy | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        self.registry = registry
        self.cache = cache
        self.store = store
        self.transport = transport
        self.policy = policy or registry.policy
        self.logger = logger or StructuredLogger()
        self._locks: dict[ImmutableCacheKey, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, *, transport: Transport | None = None) -> Fetcher:
        return cls(
            registry=default_registry(settings),
            cache=FileCache(settings.cache_dir),
            store=TarballStore(settings.store_dir),
            transport=transport or UrllibTransport(),
            policy=settings.policy,
        )

    def fetch_locator(self, text: str) -> tuple[Tree, Input]:
        input = self.registry.input_from_locator(text)
        if input is None:
            raise MalformedLocatorError(
                f"No registered scheme handles locator '{text}'.",
                hint=f"Known schemes: {', '.join(self.registry.names())}.",
                context={"locator": text},
            )
        return self.fetch(input)

    def fetch_attrs(self, attrs: Mapping[str, Any]) -> tuple[Tree, Input]:
        input = self.registry.input_from_attrs(attrs)
        if input is None:
            raise ValidationError(
                f"No registered scheme handles input type '{attrs.get('type')}'.",
                hint=f"Known schemes: {', '.join(self.registry.names())}.",
                context={"type": str(attrs.get("type"))},
            )
        return self.fetch(input)

    def fetch(self, input: Input) -> tuple[Tree, Input]:
        scheme = self._scheme_for(input)
        expected_nar_hash = input.nar_hash

        if input.ref is None and input.rev is None:
            input = apply_overrides(input, ref=DEFAULT_REF)

        rev = input.rev
        if rev is None:
            rev = self._resolve(scheme, input)
        input = apply_overrides(input, rev=rev)

        key = ImmutableCacheKey(kind=scheme.cache_kind, rev=rev)
        entry = self.cache.lookup(key)
        if entry is None:
            lock = self._lock_for(key)
            with lock:
                try:
                    entry = self.cache.lookup(key)
                    if entry is None:
                        entry = self._download(scheme, input, key)
                finally:
                    self._drop_lock(key, lock)
        else:
            self.logger.log(
                operation="cache_hit",
                scheme=scheme.type,
                input=str(input),
                message=f"Serving {rev} from cache.",
                extra={"store_path": str(entry.store_path)},
            )

        tree = Tree(path=entry.store_path, nar_hash=entry.nar_hash)
        if expected_nar_hash and tree.nar_hash and tree.nar_hash != expected_nar_hash:
            raise ReproducibilityError(
                f"Fetched tree of '{input}' does not match the expected narHash.",
                hint="Update the expected narHash or pin the input to a trusted revision.",
                context={
                    "operation": "fetch",
                    "input": str(input),
                    "expected": expected_nar_hash,
                    "actual": tree.nar_hash,
                },
            )
        return tree, input.with_fetch_info(
            last_modified=entry.last_modified,
            nar_hash=tree.nar_hash or None,
        )

    def _scheme_for(self, input: Input) -> GitArchiveScheme:
        scheme = self.registry.for_input(input)
        if scheme is None:
            raise ValidationError(
                f"No registered scheme handles input type '{input.type}'.",
                hint=f"Known schemes: {', '.join(self.registry.names())}.",
                context={"type": input.type},
            )
        return scheme

    def _resolve(self, scheme: GitArchiveScheme, input: Input) -> str:
        ref = input.ref or DEFAULT_REF
        locator = str(input)
        enforce_mutable_ref_policy(policy=self.policy, ref=ref, locator=locator)
        ensure_network_allowed(policy=self.policy, operation="resolve", locator=locator)
        rev = scheme.resolve_revision(input, transport=self.transport)
        self.logger.log(
            operation="resolve",
            scheme=scheme.type,
            input=locator,
            message=f"Resolved '{ref}' to {rev}.",
            extra={"ref": ref, "rev": rev},
        )
        return rev

    def _download(
        self,
        scheme: GitArchiveScheme,
        input: Input,
        key: ImmutableCacheKey,
    ) -> CacheEntry:
        locator = str(input)
        self.logger.log(
            operation="cache_miss",
            scheme=scheme.type,
            input=locator,
            message=f"No cached tree for {key.rev}.",
        )
        ensure_network_allowed(policy=self.policy, operation="download", locator=locator)
        request = scheme.download_request(input)
        payload = self.transport.get(request.url, headers=request.headers)
        tree, last_modified = self.store.add_tarball(payload, name="source")
        self.logger.log(
            operation="download",
            scheme=scheme.type,
            input=locator,
            message=f"Downloaded {request.url}.",
            extra={"bytes": len(payload), "store_path": str(tree.path)},
        )

        entry = CacheEntry(
            rev=key.rev,
            last_modified=last_modified,
            store_path=tree.path,
            nar_hash=tree.nar_hash,
        )
        self.cache.add(key, entry)
        self.logger.log(
            operation="cache_add",
            scheme=scheme.type,
            input=locator,
            message=f"Cached {key.kind} {key.rev}.",
            extra={"last_modified": last_modified},
        )
        return entry

    def _lock_for(self, key: ImmutableCacheKey) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(key, threading.Lock())

    def _drop_lock(self, key: ImmutableCacheKey, lock: threading.Lock) -> None:
        # Threads already waiting on `lock` re-check the cache once they acquire it.
        with self._locks_guard:
            if self._locks.get(key) is lock:
                del self._locks[key]
