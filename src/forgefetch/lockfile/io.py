"""Lockfile builder, parser, and serializer."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import cbor2

from forgefetch.attrs import input_to_attrs
from forgefetch.errors import ForgeFetchError, LockfileError
from forgefetch.lockfile.model import LOCKFILE_VERSION, Lockfile
from forgefetch.models import Input
from forgefetch.registry import SchemeRegistry


def build_lockfile(inputs: Mapping[str, Input]) -> Lockfile:
    for name, input in inputs.items():
        _require_fully_pinned(name, input)
    return Lockfile(version=LOCKFILE_VERSION, inputs=dict(sorted(inputs.items())))


def serialize_lockfile(lockfile: Lockfile) -> str:
    return json.dumps(_payload(lockfile), indent=2, sort_keys=True) + "\n"


def serialize_lockfile_cbor(lockfile: Lockfile) -> bytes:
    return cbor2.dumps(_payload(lockfile), canonical=True)


def parse_lockfile(raw: str, *, registry: SchemeRegistry) -> Lockfile:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise LockfileError("Invalid lockfile JSON.", hint=str(exc)) from exc
    return _lockfile_from_payload(payload, registry=registry)


def parse_lockfile_cbor(raw: bytes, *, registry: SchemeRegistry) -> Lockfile:
    try:
        payload = cbor2.loads(raw)
    except cbor2.CBORDecodeError as exc:
        raise LockfileError("Invalid lockfile CBOR.", hint=str(exc)) from exc
    return _lockfile_from_payload(payload, registry=registry)


def _lockfile_from_payload(payload: Any, *, registry: SchemeRegistry) -> Lockfile:
    if not isinstance(payload, dict):
        raise LockfileError("Invalid lockfile payload type.")
    version = payload.get("version")
    if version != LOCKFILE_VERSION:
        raise LockfileError(
            f"Unsupported lockfile version {version!r}.",
            context={"expected": str(LOCKFILE_VERSION)},
        )
    entries = payload.get("inputs")
    if not isinstance(entries, dict):
        raise LockfileError("Invalid lockfile `inputs` value.")

    inputs: dict[str, Input] = {}
    for name, attrs in entries.items():
        inputs[name] = _parse_entry(name, attrs, registry=registry)
    return Lockfile(version=version, inputs=inputs)


def read_lockfile(path: str | Path, *, registry: SchemeRegistry) -> Lockfile:
    lock_path = Path(path)
    try:
        raw = lock_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise LockfileError(
            "Lockfile does not exist.",
            hint="Fetch the inputs and write a lockfile first.",
            context={"path": str(lock_path)},
        ) from exc
    return parse_lockfile(raw, registry=registry)


def write_lockfile(lockfile: Lockfile, path: str | Path) -> Path:
    lock_path = Path(path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock_path.write_text(serialize_lockfile(lockfile), encoding="utf-8")
    return lock_path


def _payload(lockfile: Lockfile) -> dict[str, Any]:
    return {
        "version": lockfile.version,
        "inputs": {name: input_to_attrs(input) for name, input in lockfile.inputs.items()},
    }


def _parse_entry(name: str, attrs: Any, *, registry: SchemeRegistry) -> Input:
    if not isinstance(attrs, dict):
        raise LockfileError(f"Invalid lockfile entry for input `{name}`.")
    try:
        input = registry.input_from_attrs(attrs)
    except ForgeFetchError as exc:
        raise LockfileError(
            f"Invalid lockfile entry for input `{name}`: {exc.args[0]}",
            context={"input": name, **exc.context},
        ) from exc
    if input is None:
        raise LockfileError(
            f"Lockfile input `{name}` has unknown type '{attrs.get('type')}'.",
            context={"input": name},
        )
    _require_fully_pinned(name, input)
    return input


def _require_fully_pinned(name: str, input: Input) -> None:
    if not input.is_fully_pinned:
        raise LockfileError(
            f"Input `{name}` ('{input}') is not fully pinned.",
            hint="Fetch the input first so that rev and lastModified are known.",
            context={"input": name},
        )
