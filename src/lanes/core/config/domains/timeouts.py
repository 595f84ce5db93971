"""Domain-specific configuration for subprocess timeouts."""
from __future__ import annotations

from functools import cached_property
from typing import Dict

from lanes.core.exceptions import ConfigError

from ..base import BaseDomainConfig

_REQUIRED_TIMEOUT_KEYS = (
    "git_local_seconds",
    "git_network_seconds",
    "default_seconds",
)


class TimeoutsConfig(BaseDomainConfig):
    """Typed, cached access to the ``timeouts`` section.

    ``git_local`` bounds ref lookups and worktree operations; ``git_network``
    bounds fetches, which talk to a remote and need a longer bound.
    """

    def _config_section(self) -> str:
        return "timeouts"

    def _validate_required_keys(self) -> None:
        if not self.section:
            raise ConfigError("timeouts section missing from configuration")

        for key in _REQUIRED_TIMEOUT_KEYS:
            if key not in self.section:
                raise ConfigError(f"timeouts.{key} missing from configuration")

    @cached_property
    def git_local_seconds(self) -> float:
        self._validate_required_keys()
        return float(self.section["git_local_seconds"])

    @cached_property
    def git_network_seconds(self) -> float:
        self._validate_required_keys()
        return float(self.section["git_network_seconds"])

    @cached_property
    def default_seconds(self) -> float:
        self._validate_required_keys()
        return float(self.section["default_seconds"])

    def get_all_settings(self) -> Dict[str, float]:
        self._validate_required_keys()
        return {key: float(self.section[key]) for key in _REQUIRED_TIMEOUT_KEYS}


__all__ = ["TimeoutsConfig"]
