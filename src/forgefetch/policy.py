"""Policy configuration and enforcement helpers."""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Literal

from forgefetch.errors import PolicyError, ValidationError

MutableRefPolicy = Literal["warn", "error", "allow"]
NetworkMode = Literal["online", "offline"]
UnknownParamPolicy = Literal["error", "ignore"]


class MutableRefWarning(UserWarning):
    """Warning raised when fetching through a mutable branch/tag name."""


@dataclass(frozen=True, slots=True)
class Policy:
    network_mode: NetworkMode = "online"
    mutable_ref_policy: MutableRefPolicy = "warn"
    unknown_locator_params: UnknownParamPolicy = "error"


def ensure_network_allowed(*, policy: Policy, operation: str, locator: str = "") -> None:
    if policy.network_mode == "offline":
        raise PolicyError(
            "Network operations are disabled by policy.",
            hint="Switch policy.network_mode to 'online' or pin the input to a cached revision.",
            context={"operation": operation, "locator": locator},
        )


def enforce_mutable_ref_policy(*, policy: Policy, ref: str, locator: str) -> None:
    mode = policy.mutable_ref_policy
    if mode == "allow":
        return
    if mode == "warn":
        warnings.warn(
            f"Mutable ref `{ref}` was requested for '{locator}'; "
            "result is not inherently reproducible.",
            MutableRefWarning,
            stacklevel=3,
        )
        return
    if mode == "error":
        raise PolicyError(
            "Mutable refs are not allowed by policy.",
            hint="Use a full 40-char commit hash or relax mutable_ref_policy.",
            context={"operation": "resolve", "locator": locator, "ref": ref},
        )
    raise ValidationError(f"Unsupported mutable_ref_policy value: {mode}")
