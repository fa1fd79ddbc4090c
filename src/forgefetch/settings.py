"""Explicit configuration passed to schemes and the fetcher."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from forgefetch.errors import ValidationError
from forgefetch.policy import Policy

DEFAULT_ROOT = Path.home() / ".cache" / "forgefetch"


@dataclass(frozen=True, slots=True)
class Settings:
    github_access_token: str | None = None
    gitlab_access_token: str | None = None
    cache_dir: Path = DEFAULT_ROOT / "fetch-cache"
    store_dir: Path = DEFAULT_ROOT / "store"
    policy: Policy = field(default_factory=Policy)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        network_mode = env.get("FORGEFETCH_NETWORK_MODE", "online")
        if network_mode not in ("online", "offline"):
            raise ValidationError(
                f"Unsupported network mode '{network_mode}'.",
                hint="Use 'online' or 'offline'.",
                context={"variable": "FORGEFETCH_NETWORK_MODE"},
            )
        return cls(
            github_access_token=env.get("FORGEFETCH_GITHUB_TOKEN") or None,
            gitlab_access_token=env.get("FORGEFETCH_GITLAB_TOKEN") or None,
            cache_dir=Path(env.get("FORGEFETCH_CACHE_DIR", DEFAULT_ROOT / "fetch-cache")),
            store_dir=Path(env.get("FORGEFETCH_STORE_DIR", DEFAULT_ROOT / "store")),
            policy=Policy(network_mode=network_mode),
        )
