import io
import tarfile
from pathlib import Path

import pytest

from forgefetch.errors import TransferError
from forgefetch.store import TarballStore, tree_hash


def test_add_tarball_strips_top_level_directory(tmp_path: Path, tarball) -> None:
    store = TarballStore(tmp_path / "store")

    tree, last_modified = store.add_tarball(
        tarball({"README.md": b"hi\n", "src/lib.py": b"x = 1\n"}, mtime=1_650_000_000)
    )

    assert last_modified == 1_650_000_000
    assert (tree.path / "README.md").read_bytes() == b"hi\n"
    assert (tree.path / "src" / "lib.py").exists()
    assert tree.path.parent == tmp_path / "store"
    assert tree.path.name.endswith("-source")
    assert tree.nar_hash == tree_hash(tree.path)


def test_identical_content_maps_to_same_tree(tmp_path: Path, tarball) -> None:
    store = TarballStore(tmp_path / "store")
    files = {"README.md": b"same\n"}

    first, _ = store.add_tarball(tarball(files, prefix="acme-widget-aaaaaaa"))
    second, _ = store.add_tarball(tarball(files, prefix="someone-fork-bbbbbbb", mtime=1))

    assert first == second
    assert sorted(path.name for path in (tmp_path / "store").iterdir()) == [first.path.name]


def test_tree_hash_tracks_content_and_executable_bit(tmp_path: Path) -> None:
    root = tmp_path / "tree"
    root.mkdir()
    script = root / "run.sh"
    script.write_text("echo hi\n", encoding="utf-8")
    script.chmod(0o644)
    baseline = tree_hash(root)

    script.chmod(0o755)
    executable = tree_hash(root)
    script.write_text("echo bye\n", encoding="utf-8")

    assert baseline.startswith("sha256-")
    assert executable != baseline
    assert tree_hash(root) != executable


def test_archive_without_wrapper_directory_is_kept_as_is(tmp_path: Path) -> None:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as archive:
        for name in ("a.txt", "b.txt"):
            info = tarfile.TarInfo(name)
            info.size = 1
            info.mtime = 10 if name == "a.txt" else 20
            archive.addfile(info, io.BytesIO(b"x"))

    tree, last_modified = TarballStore(tmp_path / "store").add_tarball(buffer.getvalue())

    assert sorted(path.name for path in tree.path.iterdir()) == ["a.txt", "b.txt"]
    assert last_modified == 20


def test_corrupt_archive_raises_transfer_error(tmp_path: Path) -> None:
    store = TarballStore(tmp_path / "store")

    with pytest.raises(TransferError):
        store.add_tarball(b"<html>502 Bad Gateway</html>")

    assert list((tmp_path / "store").iterdir()) == []
