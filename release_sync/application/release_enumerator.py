"""Enumeration of source releases in replay order."""

import logging
from typing import Iterator, Optional

from release_sync.domain.release import Release
from release_sync.domain.repository import RepositoryRef
from release_sync.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)


class ReleaseEnumerator:
    """Yields the releases of a repository oldest first, honouring a resume cursor."""

    def __init__(self, github_client: GitHubRestClient):
        self.github_client = github_client

    def releases(self, source: RepositoryRef, start_from: Optional[str] = None) -> Iterator[Release]:
        """
        Yield source releases in chronological order.

        Args:
            source: Repository to read releases from
            start_from: Tag of the first release to yield. Earlier releases are
                skipped; if no release carries this tag nothing is yielded.

        Yields:
            Releases, oldest first
        """
        result = self.github_client.list_releases(source)
        logger.info(f"Found {len(result)} releases in {source}")

        if start_from:
            logger.info(f"Starting from release {start_from}")

        started = not start_from
        for release in reversed(result):
            if not started:
                if release.tag_name != start_from:
                    logger.info(f"Skipping release {release.tag_name}, starting from {start_from}")
                    continue
                started = True

            logger.info(f"Processing release {release.tag_name}")
            yield release

        if not started:
            logger.warning(f"No release tagged {start_from} found in {source}, nothing to sync")
