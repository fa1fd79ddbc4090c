"""Forge input schemes."""

from .base import GitArchiveScheme
from .github import GitHubScheme
from .gitlab import GitLabScheme

__all__ = ["GitArchiveScheme", "GitHubScheme", "GitLabScheme"]
