"""GitLab-style forge scheme (``gitlab:owner/repo``)."""

from __future__ import annotations

from typing import Any

from forgefetch.models import Input
from forgefetch.schemes.base import GitArchiveScheme, quote_segment
from forgefetch.transport import Header


class GitLabScheme(GitArchiveScheme):
    type = "gitlab"
    default_host = "gitlab.com"

    def access_header(self, token: str) -> Header:
        return ("Authorization", f"Bearer {token}")

    def commit_lookup_url(self, input: Input, ref: str) -> str:
        return (
            f"{self._project_url(input)}/repository/commits?ref_name={quote_segment(ref)}"
        )

    def extract_revision(self, payload: Any) -> str | None:
        # The commits endpoint lists history newest first.
        if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
            return None
        commit_id = payload[0].get("id")
        return commit_id if isinstance(commit_id, str) else None

    def archive_url(self, input: Input, rev: str) -> str:
        return f"{self._project_url(input)}/repository/archive.tar.gz?sha={rev}"

    def _project_url(self, input: Input) -> str:
        project = quote_segment(f"{input.owner}/{input.repo}")
        return f"https://{self.host_for(input)}/api/v4/projects/{project}"
