"""Public package entrypoint for forge tarball inputs."""

from .attrs import input_from_attrs, input_to_attrs
from .cache import FileCache, ImmutableCacheKey
from .errors import (
    ConflictingOverrideError,
    ForgeFetchError,
    LockfileError,
    MalformedLocatorError,
    PolicyError,
    ReproducibilityError,
    ResolutionError,
    TransferError,
    UnsupportedAttributeError,
    ValidationError,
)
from .fetch import Fetcher, clone
from .locator import parse_locator, to_locator
from .models import DownloadRequest, Input, RefPin, RevPin, Tree, Unspecified, apply_overrides
from .policy import MutableRefWarning, Policy
from .registry import SchemeRegistry, default_registry
from .schemes import GitArchiveScheme, GitHubScheme, GitLabScheme
from .settings import Settings
from .store import TarballStore
from .transport import UrllibTransport

__all__ = [
    "ConflictingOverrideError",
    "DownloadRequest",
    "Fetcher",
    "FileCache",
    "ForgeFetchError",
    "GitArchiveScheme",
    "GitHubScheme",
    "GitLabScheme",
    "ImmutableCacheKey",
    "Input",
    "LockfileError",
    "MalformedLocatorError",
    "MutableRefWarning",
    "Policy",
    "PolicyError",
    "RefPin",
    "ReproducibilityError",
    "ResolutionError",
    "RevPin",
    "SchemeRegistry",
    "Settings",
    "TarballStore",
    "TransferError",
    "Tree",
    "Unspecified",
    "UnsupportedAttributeError",
    "UrllibTransport",
    "ValidationError",
    "apply_overrides",
    "clone",
    "default_registry",
    "input_from_attrs",
    "input_to_attrs",
    "parse_locator",
    "to_locator",
]
