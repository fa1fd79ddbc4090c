import shutil
import subprocess
from pathlib import Path

import pytest

from forgefetch.errors import TransferError
from forgefetch.fetch import SubprocessGitCloner, clone
from forgefetch.models import Input, RefPin, RevPin
from forgefetch.schemes import GitHubScheme, GitLabScheme

REV = "0123456789abcdef0123456789abcdef01234567"


class RecordingCloner:
    def __init__(self) -> None:
        self.calls: list[dict[str, object]] = []

    def clone(self, url: str, *, ref: str, rev: str | None, dest: Path) -> None:
        self.calls.append({"url": url, "ref": ref, "rev": rev, "dest": dest})


def _git(*argv: str, cwd: Path) -> str:
    completed = subprocess.run(
        ["git", "-c", "user.name=forgefetch", "-c", "user.email=ff@example.com", *argv],
        cwd=cwd,
        check=True,
        text=True,
        capture_output=True,
    )
    return completed.stdout.strip()


def _create_repo(root: Path) -> tuple[str, str]:
    root.mkdir()
    _git("init", "--quiet", "--initial-branch=main", cwd=root)
    (root / "README.md").write_text("v1\n", encoding="utf-8")
    _git("add", "README.md", cwd=root)
    _git("commit", "--quiet", "-m", "v1", cwd=root)
    first = _git("rev-parse", "HEAD", cwd=root)
    _git("checkout", "--quiet", "-b", "feature", cwd=root)
    (root / "README.md").write_text("v2\n", encoding="utf-8")
    _git("commit", "--quiet", "-am", "v2", cwd=root)
    second = _git("rev-parse", "HEAD", cwd=root)
    _git("checkout", "--quiet", "main", cwd=root)
    return first, second


def test_clone_hands_off_ssh_url_and_pin(tmp_path: Path) -> None:
    cloner = RecordingCloner()
    pinned = Input(type="gitlab", owner="acme", repo="widget", pin=RevPin(REV), host="git.example.com")
    branch = Input(type="github", owner="acme", repo="widget", pin=RefPin("release"))
    bare = Input(type="github", owner="acme", repo="widget")

    clone(GitLabScheme(), pinned, tmp_path / "a", cloner=cloner)
    clone(GitHubScheme(), branch, tmp_path / "b", cloner=cloner)
    result = clone(GitHubScheme(), bare, tmp_path / "c", cloner=cloner)

    assert result == tmp_path / "c"
    assert cloner.calls == [
        {"url": "git+ssh://git@git.example.com/acme/widget.git", "ref": "HEAD", "rev": REV, "dest": tmp_path / "a"},
        {"url": "git+ssh://git@github.com/acme/widget.git", "ref": "release", "rev": None, "dest": tmp_path / "b"},
        {"url": "git+ssh://git@github.com/acme/widget.git", "ref": "HEAD", "rev": None, "dest": tmp_path / "c"},
    ]


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_subprocess_cloner_checks_out_branch_and_commit(tmp_path: Path) -> None:
    first, second = _create_repo(tmp_path / "origin")
    url = f"git+{(tmp_path / 'origin').as_uri()}"
    cloner = SubprocessGitCloner()

    cloner.clone(url, ref="feature", rev=None, dest=tmp_path / "feature")
    cloner.clone(url, ref="HEAD", rev=first, dest=tmp_path / "pinned")

    assert _git("rev-parse", "HEAD", cwd=tmp_path / "feature") == second
    assert (tmp_path / "feature" / "README.md").read_text(encoding="utf-8") == "v2\n"
    assert _git("rev-parse", "HEAD", cwd=tmp_path / "pinned") == first


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_subprocess_cloner_reports_git_failures(tmp_path: Path) -> None:
    _create_repo(tmp_path / "origin")
    url = f"git+{(tmp_path / 'origin').as_uri()}"

    with pytest.raises(TransferError) as excinfo:
        SubprocessGitCloner().clone(url, ref="no-such-branch", rev=None, dest=tmp_path / "out")

    assert excinfo.value.context["operation"] == "clone"
    assert "no-such-branch" in excinfo.value.context["argv"]
