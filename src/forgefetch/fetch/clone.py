"""Hand-off of forge inputs to an SSH git clone."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Protocol

from forgefetch.errors import TransferError
from forgefetch.models import DEFAULT_REF, Input
from forgefetch.schemes import GitArchiveScheme


class GitCloner(Protocol):
    def clone(self, url: str, *, ref: str, rev: str | None, dest: Path) -> None:
        """Clone ``url`` into ``dest`` and check out ``rev`` (or ``ref``)."""


class SubprocessGitCloner:
    def clone(self, url: str, *, ref: str, rev: str | None, dest: Path) -> None:
        remote = url.removeprefix("git+")
        dest.parent.mkdir(parents=True, exist_ok=True)
        if ref == DEFAULT_REF:
            _run_git(["clone", "--quiet", remote, str(dest)])
        else:
            _run_git(["clone", "--quiet", "--branch", ref, remote, str(dest)])
        if rev is not None:
            _run_git(["checkout", "--quiet", rev], cwd=dest)


def clone(scheme: GitArchiveScheme, input: Input, dest: str | Path, *, cloner: GitCloner) -> Path:
    """Clone the repository behind ``input`` instead of downloading a tarball."""
    destination = Path(dest)
    url = scheme.clone_url(input)
    cloner.clone(url, ref=input.ref or DEFAULT_REF, rev=input.rev, dest=destination)
    return destination


def _run_git(argv: list[str], cwd: Path | None = None) -> str:
    command = ["git", *argv]
    completed = subprocess.run(
        command,
        cwd=cwd,
        check=False,
        text=True,
        capture_output=True,
    )
    if completed.returncode != 0:
        raise TransferError(
            "Git command failed.",
            hint="Check SSH access to the forge and the requested revision.",
            context={
                "operation": "clone",
                "argv": " ".join(command),
                "stderr": completed.stderr.strip(),
            },
        )
    return completed.stdout.strip()
