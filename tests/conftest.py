"""Shared test fixtures."""

from __future__ import annotations

import io
import json
import tarfile
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

from forgefetch.cache import FileCache
from forgefetch.errors import TransferError
from forgefetch.fetch import Fetcher
from forgefetch.policy import Policy
from forgefetch.registry import default_registry
from forgefetch.settings import Settings
from forgefetch.store import TarballStore

MTIME = 1_700_000_000


class FakeTransport:
    """Serves canned bodies by URL and records every request."""

    def __init__(self, responses: dict[str, bytes | Exception] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, tuple[tuple[str, str], ...]]] = []

    def get(self, url: str, *, headers: Iterable[tuple[str, str]] = ()) -> bytes:
        self.calls.append((url, tuple(headers)))
        response = self.responses.get(url)
        if response is None:
            raise TransferError(
                f"Unable to download '{url}': HTTP 404.",
                context={"operation": "transfer", "url": url, "status": "404"},
            )
        if isinstance(response, Exception):
            raise response
        return response

    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


def make_tarball(
    files: dict[str, bytes],
    *,
    prefix: str = "acme-widget-0123456",
    mtime: int = MTIME,
) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        top = tarfile.TarInfo(prefix)
        top.type = tarfile.DIRTYPE
        top.mode = 0o755
        top.mtime = mtime
        archive.addfile(top)
        for name, data in sorted(files.items()):
            info = tarfile.TarInfo(f"{prefix}/{name}")
            info.size = len(data)
            info.mode = 0o644
            info.mtime = mtime
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def tarball() -> Callable[..., bytes]:
    return make_tarball


@pytest.fixture
def commit_body() -> Callable[[str], bytes]:
    def _body(rev: str) -> bytes:
        return json.dumps({"sha": rev, "commit": {"message": "initial"}}).encode("utf-8")

    return _body


@pytest.fixture
def make_fetcher(tmp_path: Path, transport: FakeTransport) -> Callable[..., Fetcher]:
    def _make(
        *,
        policy: Policy | None = None,
        github_token: str | None = None,
        gitlab_token: str | None = None,
    ) -> Fetcher:
        settings = Settings(
            github_access_token=github_token,
            gitlab_access_token=gitlab_token,
            cache_dir=tmp_path / "cache",
            store_dir=tmp_path / "store",
            policy=policy or Policy(mutable_ref_policy="allow"),
        )
        return Fetcher(
            registry=default_registry(settings),
            cache=FileCache(settings.cache_dir),
            store=TarballStore(settings.store_dir),
            transport=transport,
            policy=settings.policy,
        )

    return _make
