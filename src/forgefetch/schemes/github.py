"""GitHub-style forge scheme (``github:owner/repo``)."""

from __future__ import annotations

from typing import Any

from forgefetch.models import Input
from forgefetch.schemes.base import GitArchiveScheme, quote_segment
from forgefetch.transport import Header


class GitHubScheme(GitArchiveScheme):
    type = "github"
    default_host = "github.com"

    def access_header(self, token: str) -> Header:
        return ("Authorization", f"token {token}")

    def commit_lookup_url(self, input: Input, ref: str) -> str:
        return f"{self._repo_url(input)}/commits/{quote_segment(ref)}"

    def extract_revision(self, payload: Any) -> str | None:
        if not isinstance(payload, dict):
            return None
        sha = payload.get("sha")
        return sha if isinstance(sha, str) else None

    def archive_url(self, input: Input, rev: str) -> str:
        return f"{self._repo_url(input)}/tarball/{rev}"

    def _repo_url(self, input: Input) -> str:
        owner = quote_segment(input.owner)
        repo = quote_segment(input.repo)
        return f"https://api.{self.host_for(input)}/repos/{owner}/{repo}"
