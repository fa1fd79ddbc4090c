"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across API surfaces."""

    VALIDATION = "E_VALIDATION"
    MALFORMED_LOCATOR = "E_MALFORMED_LOCATOR"
    UNSUPPORTED_ATTRIBUTE = "E_UNSUPPORTED_ATTRIBUTE"
    CONFLICTING_OVERRIDE = "E_CONFLICTING_OVERRIDE"
    RESOLUTION = "E_RESOLUTION"
    TRANSFER = "E_TRANSFER"
    REPRODUCIBILITY = "E_REPRODUCIBILITY"
    POLICY = "E_POLICY"
    LOCKFILE = "E_LOCKFILE"


class ForgeFetchError(Exception):
    """Base error class that carries code, optional hint, and context."""

    error_code: ErrorCode = ErrorCode.VALIDATION

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = self.error_code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        for key, value in self.context.items():
            if value:
                parts.append(f"  {key}: {value}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ValidationError(ForgeFetchError):
    error_code = ErrorCode.VALIDATION


class MalformedLocatorError(ForgeFetchError):
    error_code = ErrorCode.MALFORMED_LOCATOR


class UnsupportedAttributeError(ForgeFetchError):
    error_code = ErrorCode.UNSUPPORTED_ATTRIBUTE


class ConflictingOverrideError(ForgeFetchError):
    error_code = ErrorCode.CONFLICTING_OVERRIDE


class ResolutionError(ForgeFetchError):
    error_code = ErrorCode.RESOLUTION


class TransferError(ForgeFetchError):
    error_code = ErrorCode.TRANSFER


class ReproducibilityError(ForgeFetchError):
    error_code = ErrorCode.REPRODUCIBILITY


class PolicyError(ForgeFetchError):
    error_code = ErrorCode.POLICY


class LockfileError(ForgeFetchError):
    error_code = ErrorCode.LOCKFILE


__all__ = [
    "ConflictingOverrideError",
    "ErrorCode",
    "ForgeFetchError",
    "LockfileError",
    "MalformedLocatorError",
    "PolicyError",
    "ReproducibilityError",
    "ResolutionError",
    "TransferError",
    "UnsupportedAttributeError",
    "ValidationError",
]
