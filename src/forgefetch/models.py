"""Core typed dataclasses for inputs, pins, and fetch results."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from pathlib import Path

from forgefetch.errors import ConflictingOverrideError, ValidationError

REV_PATTERN = re.compile(r"^[0-9a-fA-F]{40}$")
REF_PATTERN = re.compile(r"^[a-zA-Z0-9@][a-zA-Z0-9_./@+-]*$")
# Names git itself refuses (see git-check-ref-format).
BAD_REF_PATTERN = re.compile(
    r"//|^[./]|/\.|\.\.|[\x00-\x20\x7f:?^~\[\\*]|\.lock$|\.lock/|@\{|[/.]$|^@$|^$"
)

DEFAULT_REF = "HEAD"


def is_valid_ref(name: str) -> bool:
    return bool(REF_PATTERN.fullmatch(name)) and not BAD_REF_PATTERN.search(name)


def is_valid_rev(value: str) -> bool:
    return bool(REV_PATTERN.fullmatch(value))


@dataclass(frozen=True, slots=True)
class Unspecified:
    """Neither a branch/tag name nor a commit has been chosen yet."""


@dataclass(frozen=True, slots=True)
class RefPin:
    ref: str

    def __post_init__(self) -> None:
        if not is_valid_ref(self.ref):
            raise ValidationError(
                f"'{self.ref}' is not a valid branch/tag name.",
                hint="Branch and tag names follow git-check-ref-format rules.",
                context={"ref": self.ref},
            )


@dataclass(frozen=True, slots=True)
class RevPin:
    rev: str

    def __post_init__(self) -> None:
        if not is_valid_rev(self.rev):
            raise ValidationError(
                f"'{self.rev}' is not a 40-character hexadecimal commit hash.",
                context={"rev": self.rev},
            )
        object.__setattr__(self, "rev", self.rev.lower())


Pin = Unspecified | RefPin | RevPin

UNSPECIFIED = Unspecified()


@dataclass(frozen=True, slots=True)
class Input:
    """A reference to a repository on a forge, possibly resolved and fetched.

    ``pin`` holds at most one of a branch/tag name or a commit hash, which
    keeps ``ref`` and ``rev`` mutually exclusive. ``nar_hash`` and
    ``last_modified`` are only known after a fetch.
    """

    type: str
    owner: str
    repo: str
    pin: Pin = UNSPECIFIED
    host: str | None = None
    nar_hash: str | None = None
    last_modified: int | None = None

    @property
    def ref(self) -> str | None:
        return self.pin.ref if isinstance(self.pin, RefPin) else None

    @property
    def rev(self) -> str | None:
        return self.pin.rev if isinstance(self.pin, RevPin) else None

    @property
    def is_fully_pinned(self) -> bool:
        return self.rev is not None and self.last_modified is not None

    def with_fetch_info(self, *, last_modified: int, nar_hash: str | None) -> Input:
        return replace(self, last_modified=last_modified, nar_hash=nar_hash or self.nar_hash)

    def __str__(self) -> str:
        from forgefetch.locator import to_locator

        return to_locator(self)


def apply_overrides(input: Input, *, ref: str | None = None, rev: str | None = None) -> Input:
    """Return a copy of ``input`` re-pinned to ``ref`` or ``rev``.

    This is the only place a pin changes; setting one side always clears
    the other.
    """
    if ref is not None and rev is not None:
        raise ConflictingOverrideError(
            f"Cannot apply both a commit hash ({rev}) and a branch/tag name ('{ref}') "
            f"to input '{input}'.",
            hint="Pass either ref or rev, not both.",
            context={"input": str(input), "ref": ref, "rev": rev},
        )
    if rev is not None:
        return replace(input, pin=RevPin(rev))
    if ref is not None:
        if not is_valid_ref(ref):
            raise ValidationError(
                f"Cannot pin input '{input}' to invalid branch/tag name '{ref}'.",
                hint="Branch and tag names follow git-check-ref-format rules.",
                context={"input": str(input), "ref": ref},
            )
        return replace(input, pin=RefPin(ref))
    return replace(input)


@dataclass(frozen=True, slots=True)
class DownloadRequest:
    url: str
    access_header: tuple[str, str] | None = None

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return (self.access_header,) if self.access_header is not None else ()


@dataclass(frozen=True, slots=True)
class Tree:
    path: Path
    nar_hash: str


@dataclass(frozen=True, slots=True)
class CacheEntry:
    rev: str
    last_modified: int
    store_path: Path
    nar_hash: str = ""


__all__ = [
    "BAD_REF_PATTERN",
    "DEFAULT_REF",
    "REF_PATTERN",
    "REV_PATTERN",
    "UNSPECIFIED",
    "CacheEntry",
    "DownloadRequest",
    "Input",
    "Pin",
    "RefPin",
    "RevPin",
    "Tree",
    "Unspecified",
    "apply_overrides",
    "is_valid_ref",
    "is_valid_rev",
]
