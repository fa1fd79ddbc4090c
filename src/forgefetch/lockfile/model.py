"""Lockfile typed model."""

from __future__ import annotations

from dataclasses import dataclass, field

from forgefetch.models import Input

LOCKFILE_VERSION = 1


@dataclass(frozen=True, slots=True)
class Lockfile:
    version: int
    inputs: dict[str, Input] = field(default_factory=dict)
