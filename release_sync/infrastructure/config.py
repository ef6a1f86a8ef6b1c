"""Run settings read from the environment of the invoking workflow step."""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from release_sync.domain.errors import ConfigurationError

TRUTHY = {"1", "true", "yes", "y", "on"}


def _input(env: Mapping[str, str], name: str) -> str:
    """
    Read an action input.

    GitHub Actions exposes inputs as INPUT_<NAME>; the plain upper-case
    variable is accepted as well so the script can run outside a workflow.
    """
    key = name.upper()
    value = env.get(f"INPUT_{key}") or env.get(key) or ""
    return value.strip()


def _log_level(value: Optional[str]) -> str:
    """Normalize a logging level name; unknown names fall back to INFO."""
    name = (value or "").strip().upper()
    if name and isinstance(logging.getLevelName(name), int):
        return name
    return "INFO"


@dataclass(frozen=True)
class SyncSettings:
    """Immutable settings for one sync run."""

    github_token: str
    source_repo: str
    target_repo: Optional[str] = None
    default_target_repo: Optional[str] = None
    delete_releases: bool = False
    start_from: Optional[str] = None
    api_url: str = "https://api.github.com"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "SyncSettings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from. If None, uses os.environ.

        Returns:
            Parsed settings

        Raises:
            ConfigurationError: If the token or the source repository is missing
        """
        if env is None:
            env = os.environ

        github_token = _input(env, "github_token")
        if not github_token:
            raise ConfigurationError("Input required and not supplied: github_token")

        source_repo = _input(env, "source_repo")
        if not source_repo:
            raise ConfigurationError("Input required and not supplied: source_repo")

        return cls(
            github_token=github_token,
            source_repo=source_repo,
            target_repo=_input(env, "target_repo") or None,
            default_target_repo=(env.get("GITHUB_REPOSITORY") or "").strip() or None,
            delete_releases=_input(env, "delete_releases").lower() in TRUTHY,
            start_from=_input(env, "start_from") or None,
            api_url=(env.get("GITHUB_API_URL") or "").strip() or "https://api.github.com",
            log_level=_log_level(env.get("LOG_LEVEL")),
        )
