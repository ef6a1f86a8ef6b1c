"""Application service for synchronizing releases between repositories."""

import logging
from dataclasses import dataclass
from typing import Optional

from release_sync.application.asset_transfer import AssetTransferEngine
from release_sync.application.release_enumerator import ReleaseEnumerator
from release_sync.application.repository_resolver import RepositoryResolver
from release_sync.domain.errors import RateLimitExhaustedError
from release_sync.domain.release import LookupStatus, RateLimitSnapshot, Release
from release_sync.domain.repository import RepositoryRef
from release_sync.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)


@dataclass
class SyncReport:
    """Counters for a single sync run."""

    processed: int = 0
    created: int = 0
    replaced: int = 0
    skipped: int = 0
    assets_uploaded: int = 0


class RateLimitGuard:
    """Stops the run before the remaining API quota drops below a floor."""

    def __init__(self, github_client: GitHubRestClient, floor: float = 0.2):
        self.github_client = github_client
        self.floor = floor

    def check(self) -> RateLimitSnapshot:
        """
        Sample the quota and fail fast when it is too low.

        Raises:
            RateLimitExhaustedError: If remaining < floor * limit
        """
        snapshot = self.github_client.get_rate_limit()
        logger.info(f"Rate limit remaining: {snapshot.remaining}, limit: {snapshot.limit} ({snapshot.ratio():.0%})")
        if snapshot.is_below(self.floor):
            raise RateLimitExhaustedError(
                f"Rate limit almost exhausted, remaining: {snapshot.remaining}, limit: {snapshot.limit}",
                snapshot=snapshot,
            )
        return snapshot


class ReleaseSyncService:
    """Service for copying releases from a source repository to a target repository."""

    RATE_LIMIT_FLOOR = 0.2  # Abort when less than 20% of the quota is left

    def __init__(
        self,
        github_client: GitHubRestClient,
        delete_releases: bool = False,
        resolver: Optional[RepositoryResolver] = None,
        enumerator: Optional[ReleaseEnumerator] = None,
        transfer_engine: Optional[AssetTransferEngine] = None,
        rate_limit_guard: Optional[RateLimitGuard] = None,
    ):
        """
        Initialize sync service.

        Args:
            github_client: GitHub API client shared by every component
            delete_releases: Replace same-tag target releases instead of skipping them
            resolver: Repository resolver (built from the client if omitted)
            enumerator: Release enumerator (built from the client if omitted)
            transfer_engine: Asset transfer engine (built from the client if omitted)
            rate_limit_guard: Quota guard (built from the client if omitted)
        """
        self.github_client = github_client
        self.delete_releases = delete_releases
        self.resolver = resolver or RepositoryResolver(github_client)
        self.enumerator = enumerator or ReleaseEnumerator(github_client)
        self.transfer_engine = transfer_engine or AssetTransferEngine(github_client)
        self.rate_limit_guard = rate_limit_guard or RateLimitGuard(github_client, self.RATE_LIMIT_FLOOR)

    def run(
        self,
        source_repo: str,
        target_repo: Optional[str] = None,
        default_target_repo: Optional[str] = None,
        start_from: Optional[str] = None,
    ) -> SyncReport:
        """
        Resolve both repositories and sync every candidate release.

        Args:
            source_repo: Source identifier in owner/name form
            target_repo: Target identifier in owner/name form
            default_target_repo: Fallback target (the workflow's own repository)
            start_from: Resume cursor tag

        Returns:
            Report of what the run did
        """
        source, target = self.resolver.resolve(source_repo, target_repo, default_target_repo)
        return self.sync(source, target, start_from=start_from)

    def sync(self, source: RepositoryRef, target: RepositoryRef, start_from: Optional[str] = None) -> SyncReport:
        """Sync releases of an already resolved repository pair, oldest first."""
        report = SyncReport()
        for release in self.enumerator.releases(source, start_from):
            self.rate_limit_guard.check()
            self._sync_release(source, target, release, report)
            report.processed += 1

        logger.info(
            f"Sync completed. Processed {report.processed} releases: "
            f"{report.created} created, {report.replaced} replaced, {report.skipped} skipped, "
            f"{report.assets_uploaded} assets uploaded"
        )
        return report

    def _sync_release(self, source: RepositoryRef, target: RepositoryRef, release: Release, report: SyncReport) -> None:
        lookup = self.github_client.get_release_by_tag(target, release.tag_name)

        if lookup.status is LookupStatus.FAILED:
            logger.error(f"Lookup of release {release.tag_name} in {target} failed: {lookup.error}")
            raise lookup.error

        replaced = False
        if lookup.status is LookupStatus.FOUND:
            logger.info(f"Release {release.tag_name} exists in {target}")
            if not self.delete_releases:
                logger.info(f"Skipping release {release.tag_name} in {target}")
                report.skipped += 1
                return

            logger.info(f"Deleting release {release.tag_name} in {target}")
            self.github_client.delete_release(target, lookup.release.id)
            replaced = True

        report.assets_uploaded += self.transfer_engine.copy_release(source, target, release)
        if replaced:
            report.replaced += 1
        else:
            report.created += 1
