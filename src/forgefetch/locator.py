"""Locator string parsing and rendering.

A locator is the compact form of an :class:`~forgefetch.models.Input`::

    <scheme>:<owner>/<repo>[/<ref-or-rev>][?rev=<hex>&ref=<name>&host=<hostname>]
"""

from __future__ import annotations

import re
from urllib.parse import parse_qsl, quote, unquote, urlencode, urlsplit

from forgefetch.errors import MalformedLocatorError, ValidationError
from forgefetch.models import UNSPECIFIED, Input, Pin, RefPin, RevPin, is_valid_ref, is_valid_rev
from forgefetch.policy import Policy

HOST_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9.-]*(:[0-9]{1,5})?$")

LOCATOR_PARAMS = ("rev", "ref", "host")


def is_valid_host(value: str) -> bool:
    return bool(HOST_PATTERN.fullmatch(value))


def locator_scheme(text: str) -> str | None:
    """Return the scheme part of ``text``, or ``None`` when there is none."""
    scheme, sep, _ = text.partition(":")
    if not sep or not scheme:
        return None
    return scheme


def parse_locator(text: str, *, scheme_type: str, policy: Policy | None = None) -> Input:
    policy = policy or Policy()
    parts = urlsplit(text)
    if parts.scheme != scheme_type:
        raise MalformedLocatorError(
            f"Locator '{text}' does not use the '{scheme_type}' scheme.",
            context={"locator": text, "scheme": parts.scheme},
        )
    if parts.netloc or parts.fragment:
        raise MalformedLocatorError(
            f"Locator '{text}' is invalid.",
            hint=f"Use the form {scheme_type}:<owner>/<repo>[/<ref-or-rev>].",
            context={"locator": text},
        )

    segments = [unquote(item) for item in parts.path.split("/") if item]
    if len(segments) not in (2, 3):
        raise MalformedLocatorError(
            f"Locator '{text}' is invalid.",
            hint=f"Use the form {scheme_type}:<owner>/<repo>[/<ref-or-rev>].",
            context={"locator": text, "segments": str(len(segments))},
        )

    rev: str | None = None
    ref: str | None = None
    if len(segments) == 3:
        third = segments[2]
        if is_valid_rev(third):
            rev = third
        elif is_valid_ref(third):
            ref = third
        else:
            raise MalformedLocatorError(
                f"In locator '{text}', '{third}' is not a commit hash or branch/tag name.",
                context={"locator": text, "segment": third},
            )

    query = _parse_query(text, parts.query, policy=policy)
    host = query.get("host")
    if len(segments) == 3 and ("rev" in query or "ref" in query):
        raise MalformedLocatorError(
            f"Locator '{text}' names a revision in both its path and its query.",
            context={"locator": text, "segment": segments[2]},
        )
    if "rev" in query:
        if not is_valid_rev(query["rev"]):
            raise MalformedLocatorError(
                f"Locator '{text}' contains an invalid commit hash '{query['rev']}'.",
                context={"locator": text, "rev": query["rev"]},
            )
        rev = query["rev"]
    if "ref" in query:
        if not is_valid_ref(query["ref"]):
            raise MalformedLocatorError(
                f"Locator '{text}' contains an invalid branch/tag name '{query['ref']}'.",
                context={"locator": text, "ref": query["ref"]},
            )
        ref = query["ref"]
    if ref is not None and rev is not None:
        raise MalformedLocatorError(
            f"Locator '{text}' contains both a commit hash and a branch/tag name "
            f"('{ref}', {rev}).",
            hint="Keep only one of ref and rev.",
            context={"locator": text, "ref": ref, "rev": rev},
        )
    if host is not None and not is_valid_host(host):
        raise MalformedLocatorError(
            f"Locator '{text}' contains an invalid instance host '{host}'.",
            context={"locator": text, "host": host},
        )

    pin: Pin = UNSPECIFIED
    if rev is not None:
        pin = RevPin(rev)
    elif ref is not None:
        pin = RefPin(ref)
    return Input(type=scheme_type, owner=segments[0], repo=segments[1], pin=pin, host=host)


def to_locator(input: Input) -> str:
    if not input.owner or not input.repo:
        raise ValidationError(
            "Input requires both `owner` and `repo` to render a locator.",
            context={"type": input.type, "owner": input.owner, "repo": input.repo},
        )
    assert not (input.ref is not None and input.rev is not None)
    path = f"{quote(input.owner, safe='')}/{quote(input.repo, safe='')}"
    query: list[tuple[str, str]] = []
    if input.rev is not None:
        path += f"/{input.rev}"
    elif input.ref is not None:
        # A hex name in the path would read back as a commit.
        if "/" in input.ref or is_valid_rev(input.ref):
            query.append(("ref", input.ref))
        else:
            path += f"/{input.ref}"
    if input.host is not None:
        query.append(("host", input.host))
    locator = f"{input.type}:{path}"
    if query:
        locator += "?" + urlencode(query, safe="/")
    return locator


def _parse_query(text: str, raw: str, *, policy: Policy) -> dict[str, str]:
    params: dict[str, str] = {}
    for name, value in parse_qsl(raw, keep_blank_values=True):
        if name not in LOCATOR_PARAMS:
            if policy.unknown_locator_params == "ignore":
                continue
            raise MalformedLocatorError(
                f"Locator '{text}' contains unsupported parameter '{name}'.",
                hint="Supported parameters are rev, ref and host.",
                context={"locator": text, "parameter": name},
            )
        if name in params:
            raise MalformedLocatorError(
                f"Locator '{text}' contains multiple '{name}' parameters.",
                context={"locator": text, "parameter": name},
            )
        params[name] = value
    return params
