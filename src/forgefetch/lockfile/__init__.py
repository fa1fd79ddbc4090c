"""Lockfile model types and IO."""

from .io import (
    build_lockfile,
    parse_lockfile,
    parse_lockfile_cbor,
    read_lockfile,
    serialize_lockfile,
    serialize_lockfile_cbor,
    write_lockfile,
)
from .model import LOCKFILE_VERSION, Lockfile

__all__ = [
    "LOCKFILE_VERSION",
    "Lockfile",
    "build_lockfile",
    "parse_lockfile",
    "parse_lockfile_cbor",
    "read_lockfile",
    "serialize_lockfile",
    "serialize_lockfile_cbor",
    "write_lockfile",
]
