"""Resolution of the source and target repositories of a sync run."""

import logging
from typing import Optional, Tuple

from release_sync.domain.errors import ConfigurationError, NotFoundError
from release_sync.domain.repository import RepositoryRef
from release_sync.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)


class RepositoryResolver:
    """Parses repository identifiers and confirms both repositories exist."""

    def __init__(self, github_client: GitHubRestClient):
        self.github_client = github_client

    def resolve(
        self,
        source_repo: str,
        target_repo: Optional[str] = None,
        default_target_repo: Optional[str] = None,
    ) -> Tuple[RepositoryRef, RepositoryRef]:
        """
        Resolve the source and target repositories.

        Args:
            source_repo: Source identifier in owner/name form
            target_repo: Target identifier; falls back to default_target_repo
            default_target_repo: Repository the workflow runs in (GITHUB_REPOSITORY)

        Returns:
            Tuple of (source, target) references

        Raises:
            ConfigurationError: If an identifier is malformed, or no target is available
            NotFoundError: If either repository cannot be found
        """
        source = RepositoryRef.parse(source_repo)

        target_id = target_repo or default_target_repo
        if not target_id:
            raise ConfigurationError("target_repo is not set and GITHUB_REPOSITORY is not available")
        target = RepositoryRef.parse(target_id)

        if not self.github_client.repository_exists(source):
            raise NotFoundError(f"Source repository {source} does not exist")
        if not self.github_client.repository_exists(target):
            raise NotFoundError(f"Target repository {target} does not exist")

        logger.info(f"Syncing releases from {source} to {target}")
        return source, target
