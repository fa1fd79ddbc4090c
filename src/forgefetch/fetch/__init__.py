"""Fetching forge inputs into the tree store."""

from .clone import GitCloner, SubprocessGitCloner, clone
from .orchestrator import Fetcher

__all__ = ["Fetcher", "GitCloner", "SubprocessGitCloner", "clone"]
