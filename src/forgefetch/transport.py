"""HTTP(S) transport used for revision lookups and archive downloads."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from forgefetch.errors import TransferError

Header = tuple[str, str]


class Transport(Protocol):
    def get(self, url: str, *, headers: Iterable[Header] = ()) -> bytes:
        """Perform a GET and return the full response body."""


class UrllibTransport:
    """Blocking transport built on ``urllib``; failures are never retried."""

    def __init__(self, *, timeout: float | None = None, user_agent: str = "forgefetch") -> None:
        self.timeout = timeout
        self.user_agent = user_agent

    def get(self, url: str, *, headers: Iterable[Header] = ()) -> bytes:
        request = Request(url, headers={"User-Agent": self.user_agent})
        for name, value in headers:
            request.add_header(name, value)
        try:
            with urlopen(request, timeout=self.timeout) as response:  # noqa: S310 - forge URLs only
                return response.read()
        except HTTPError as exc:
            raise TransferError(
                f"Unable to download '{url}': HTTP {exc.code}.",
                hint="Check that the repository exists and the access token is valid.",
                context={"operation": "transfer", "url": url, "status": str(exc.code)},
            ) from exc
        except (URLError, OSError) as exc:
            reason = getattr(exc, "reason", exc)
            raise TransferError(
                f"Unable to download '{url}': {reason}.",
                context={"operation": "transfer", "url": url},
            ) from exc
