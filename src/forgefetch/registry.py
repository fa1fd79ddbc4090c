"""Registry mapping scheme names to forge input schemes."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from forgefetch.errors import ValidationError
from forgefetch.models import Input
from forgefetch.policy import Policy
from forgefetch.schemes import GitArchiveScheme, GitHubScheme, GitLabScheme
from forgefetch.settings import Settings


class SchemeRegistry:
    """Scheme table filled once at startup and read-only after :meth:`freeze`.

    Lookups that match no scheme return ``None`` so callers can probe several
    registries in turn.
    """

    def __init__(self, *, policy: Policy | None = None) -> None:
        self.policy = policy or Policy()
        self._schemes: dict[str, GitArchiveScheme] = {}
        self._frozen = False

    def register(self, scheme: GitArchiveScheme) -> GitArchiveScheme:
        if self._frozen:
            raise ValidationError(
                f"Cannot register scheme '{scheme.type}' after the registry was frozen.",
                context={"scheme": scheme.type},
            )
        if scheme.type in self._schemes:
            raise ValidationError(
                f"Scheme '{scheme.type}' is already registered.",
                context={"scheme": scheme.type},
            )
        self._schemes[scheme.type] = scheme
        return scheme

    def freeze(self) -> SchemeRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def names(self) -> tuple[str, ...]:
        return tuple(self._schemes)

    def get(self, name: str) -> GitArchiveScheme | None:
        return self._schemes.get(name)

    def for_input(self, input: Input) -> GitArchiveScheme | None:
        return self._schemes.get(input.type)

    def input_from_locator(self, text: str) -> Input | None:
        for scheme in self._schemes.values():
            input = scheme.input_from_locator(text, policy=self.policy)
            if input is not None:
                return input
        return None

    def input_from_attrs(self, attrs: Mapping[str, Any]) -> Input | None:
        for scheme in self._schemes.values():
            input = scheme.input_from_attrs(attrs)
            if input is not None:
                return input
        return None


def default_registry(settings: Settings | None = None) -> SchemeRegistry:
    settings = settings or Settings()
    registry = SchemeRegistry(policy=settings.policy)
    registry.register(GitHubScheme(access_token=settings.github_access_token))
    registry.register(GitLabScheme(access_token=settings.gitlab_access_token))
    return registry.freeze()
