"""Shared contract for forge archive input schemes."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from forgefetch.attrs import input_from_attrs
from forgefetch.errors import ResolutionError, TransferError
from forgefetch.locator import locator_scheme, parse_locator, to_locator
from forgefetch.models import DEFAULT_REF, DownloadRequest, Input, apply_overrides, is_valid_rev
from forgefetch.policy import Policy
from forgefetch.transport import Header, Transport


class GitArchiveScheme(ABC):
    """A forge that serves commit lookups and source tarballs over a REST API.

    Subclasses provide the endpoint shapes; parsing, overrides, and the
    pinned-ness check are shared.
    """

    type: str
    default_host: str

    def __init__(self, *, access_token: str | None = None) -> None:
        self.access_token = access_token or None

    @property
    def cache_kind(self) -> str:
        return f"{self.type}-tarball"

    def host_for(self, input: Input) -> str:
        return input.host or self.default_host

    def input_from_locator(self, text: str, *, policy: Policy | None = None) -> Input | None:
        if locator_scheme(text) != self.type:
            return None
        return parse_locator(text, scheme_type=self.type, policy=policy)

    def input_from_attrs(self, attrs: Mapping[str, Any]) -> Input | None:
        return input_from_attrs(attrs, scheme_type=self.type)

    def to_locator(self, input: Input) -> str:
        return to_locator(input)

    def is_fully_pinned(self, input: Input) -> bool:
        return input.is_fully_pinned

    def apply_overrides(
        self,
        input: Input,
        *,
        ref: str | None = None,
        rev: str | None = None,
    ) -> Input:
        return apply_overrides(input, ref=ref, rev=rev)

    def auth_headers(self) -> tuple[Header, ...]:
        if self.access_token is None:
            return ()
        return (self.access_header(self.access_token),)

    def download_request(self, input: Input) -> DownloadRequest:
        rev = self._require_rev(input)
        url = self.archive_url(input, rev)
        if self.access_token is None:
            return DownloadRequest(url=url)
        return DownloadRequest(url=url, access_header=self.access_header(self.access_token))

    def resolve_revision(self, input: Input, *, transport: Transport) -> str:
        ref = input.ref or DEFAULT_REF
        url = self.commit_lookup_url(input, ref)
        try:
            body = transport.get(url, headers=self.auth_headers())
        except TransferError as exc:
            raise ResolutionError(
                f"Unable to resolve '{ref}' of '{input}'.",
                hint=exc.hint,
                context={**exc.context, "operation": "resolve", "url": url, "ref": ref},
            ) from exc
        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ResolutionError(
                f"Commit lookup for '{input}' returned a body that is not JSON.",
                context={"operation": "resolve", "url": url, "ref": ref},
            ) from exc
        rev = self.extract_revision(payload)
        if rev is None or not is_valid_rev(rev):
            raise ResolutionError(
                f"Commit lookup for '{input}' did not return a commit hash for '{ref}'.",
                hint="Check that the branch or tag exists.",
                context={"operation": "resolve", "url": url, "ref": ref, "value": str(rev)},
            )
        return rev.lower()

    def clone_url(self, input: Input) -> str:
        return f"git+ssh://git@{self.host_for(input)}/{input.owner}/{input.repo}.git"

    @abstractmethod
    def access_header(self, token: str) -> Header:
        """Return the authorization header carrying ``token``."""

    @abstractmethod
    def commit_lookup_url(self, input: Input, ref: str) -> str:
        """Return the REST endpoint that resolves ``ref`` to a commit."""

    @abstractmethod
    def extract_revision(self, payload: Any) -> str | None:
        """Pull the commit identifier out of a decoded lookup response."""

    @abstractmethod
    def archive_url(self, input: Input, rev: str) -> str:
        """Return the tarball endpoint for commit ``rev``."""

    def _require_rev(self, input: Input) -> str:
        if input.rev is None:
            raise ResolutionError(
                f"Input '{input}' has no commit hash to download.",
                hint="Resolve the input before building a download request.",
                context={"operation": "download", "input": str(input)},
            )
        return input.rev


def quote_segment(value: str) -> str:
    return quote(value, safe="")
