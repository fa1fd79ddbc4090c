"""Conversion between attribute records and typed inputs."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from forgefetch.errors import UnsupportedAttributeError, ValidationError
from forgefetch.models import UNSPECIFIED, Input, Pin, RefPin, RevPin, is_valid_ref, is_valid_rev

Attrs = dict[str, str | int]

ALLOWED_ATTRS = frozenset(
    {"type", "owner", "repo", "ref", "rev", "narHash", "lastModified", "host"}
)


def input_from_attrs(attrs: Mapping[str, Any], *, scheme_type: str) -> Input | None:
    """Build an input from ``attrs``, or return ``None`` if it belongs to another scheme."""
    if attrs.get("type") != scheme_type:
        return None

    for name in attrs:
        if name not in ALLOWED_ATTRS:
            raise UnsupportedAttributeError(
                f"Unsupported input attribute '{name}'.",
                hint=f"Supported attributes are: {', '.join(sorted(ALLOWED_ATTRS))}.",
                context={"type": scheme_type, "attribute": name},
            )

    owner = _required_str(attrs, "owner", scheme_type=scheme_type)
    repo = _required_str(attrs, "repo", scheme_type=scheme_type)
    ref = _optional_str(attrs, "ref", scheme_type=scheme_type)
    rev = _optional_str(attrs, "rev", scheme_type=scheme_type)
    host = _optional_str(attrs, "host", scheme_type=scheme_type)
    nar_hash = _optional_str(attrs, "narHash", scheme_type=scheme_type)
    last_modified = _optional_int(attrs, "lastModified", scheme_type=scheme_type)

    if ref is not None and rev is not None:
        raise ValidationError(
            f"Input '{scheme_type}:{owner}/{repo}' has both a `ref` ('{ref}') and a `rev` ({rev}).",
            hint="Keep only one of ref and rev.",
            context={"type": scheme_type, "ref": ref, "rev": rev},
        )
    if rev is not None and not is_valid_rev(rev):
        raise ValidationError(
            f"Attribute `rev` value '{rev}' is not a 40-character hexadecimal commit hash.",
            context={"type": scheme_type, "attribute": "rev", "value": rev},
        )
    if ref is not None and not is_valid_ref(ref):
        raise ValidationError(
            f"Attribute `ref` value '{ref}' is not a valid branch/tag name.",
            hint="Branch and tag names follow git-check-ref-format rules.",
            context={"type": scheme_type, "attribute": "ref", "value": ref},
        )

    pin: Pin = UNSPECIFIED
    if rev is not None:
        pin = RevPin(rev)
    elif ref is not None:
        pin = RefPin(ref)
    return Input(
        type=scheme_type,
        owner=owner,
        repo=repo,
        pin=pin,
        host=host,
        nar_hash=nar_hash,
        last_modified=last_modified,
    )


def input_to_attrs(input: Input) -> Attrs:
    attrs: Attrs = {"type": input.type, "owner": input.owner, "repo": input.repo}
    if input.ref is not None:
        attrs["ref"] = input.ref
    if input.rev is not None:
        attrs["rev"] = input.rev
    if input.host is not None:
        attrs["host"] = input.host
    if input.nar_hash is not None:
        attrs["narHash"] = input.nar_hash
    if input.last_modified is not None:
        attrs["lastModified"] = input.last_modified
    return attrs


def _required_str(attrs: Mapping[str, Any], key: str, *, scheme_type: str) -> str:
    value = attrs.get(key)
    if value is None:
        raise ValidationError(
            f"Attribute `{key}` is missing.",
            context={"type": scheme_type, "attribute": key},
        )
    if not isinstance(value, str) or not value:
        raise ValidationError(
            f"Attribute `{key}` must be a non-empty string, got {value!r}.",
            context={"type": scheme_type, "attribute": key},
        )
    return value


def _optional_str(attrs: Mapping[str, Any], key: str, *, scheme_type: str) -> str | None:
    if key not in attrs:
        return None
    return _required_str(attrs, key, scheme_type=scheme_type)


def _optional_int(attrs: Mapping[str, Any], key: str, *, scheme_type: str) -> int | None:
    if key not in attrs:
        return None
    value = attrs[key]
    # bool is an int subclass but never a timestamp
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(
            f"Attribute `{key}` must be an integer, got {value!r}.",
            context={"type": scheme_type, "attribute": key},
        )
    return value
