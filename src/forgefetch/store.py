"""Content-addressed tree store fed from source tarballs."""

from __future__ import annotations

import hashlib
import io
import os
import shutil
import stat
import tarfile
import tempfile
from pathlib import Path
from typing import Protocol

from forgefetch.errors import TransferError
from forgefetch.models import Tree


class TreeStore(Protocol):
    def add_tarball(self, payload: bytes, *, name: str = "source") -> tuple[Tree, int]:
        """Materialize an archive and return the tree plus its newest mtime."""


class TarballStore:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def add_tarball(self, payload: bytes, *, name: str = "source") -> tuple[Tree, int]:
        temp_root = Path(tempfile.mkdtemp(prefix="forgefetch-unpack-", dir=str(self.root)))
        try:
            last_modified = _extract(payload, temp_root)
            source = _single_top_level_dir(temp_root)
            nar_hash = tree_hash(source)
            final_path = self.root / f"{nar_hash.removeprefix('sha256-')[:32]}-{name}"
            if not final_path.exists():
                try:
                    os.replace(source, final_path)
                except OSError:
                    # Another writer materialized the same tree first.
                    if not final_path.exists():
                        raise
        finally:
            if temp_root.exists():
                shutil.rmtree(temp_root, ignore_errors=True)
        return Tree(path=final_path, nar_hash=nar_hash), last_modified


def tree_hash(root: Path) -> str:
    """Digest file names, kinds, executable bits, and contents under ``root``."""
    digest = hashlib.sha256()
    for path in sorted(root.rglob("*"), key=lambda item: item.relative_to(root).as_posix()):
        relative = path.relative_to(root).as_posix()
        if path.is_symlink():
            digest.update(f"symlink\0{relative}\0{os.readlink(path)}\0".encode())
        elif path.is_dir():
            digest.update(f"directory\0{relative}\0".encode())
        else:
            executable = bool(path.stat().st_mode & stat.S_IXUSR)
            digest.update(f"regular\0{relative}\0{int(executable)}\0".encode())
            digest.update(hashlib.sha256(path.read_bytes()).digest())
    return f"sha256-{digest.hexdigest()}"


def _extract(payload: bytes, dest: Path) -> int:
    try:
        with tarfile.open(fileobj=io.BytesIO(payload), mode="r:*") as archive:
            members = archive.getmembers()
            archive.extractall(path=str(dest), filter="data")
    except (tarfile.TarError, OSError, EOFError) as exc:
        raise TransferError(
            "Downloaded archive could not be unpacked.",
            hint="The forge may have returned an error page instead of a tarball.",
            context={"operation": "unpack", "error": str(exc)},
        ) from exc
    return max((int(member.mtime) for member in members), default=0)


def _single_top_level_dir(root: Path) -> Path:
    # Forge tarballs wrap the tree in one `<repo>-<rev>/` directory.
    entries = list(root.iterdir())
    if len(entries) == 1 and entries[0].is_dir() and not entries[0].is_symlink():
        return entries[0]
    return root
