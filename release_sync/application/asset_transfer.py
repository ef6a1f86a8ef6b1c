"""Copying a release and its binary assets into the target repository."""

import logging
from typing import List

from release_sync.domain.errors import ApiError, AssetTransferError
from release_sync.domain.release import Release
from release_sync.domain.repository import RepositoryRef
from release_sync.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)


class AssetTransferEngine:
    """Creates a release in the target and re-uploads every source asset byte for byte."""

    def __init__(self, github_client: GitHubRestClient):
        self.github_client = github_client

    def copy_release(self, source: RepositoryRef, target: RepositoryRef, release: Release) -> int:
        """
        Create ``release`` in the target repository and copy its assets.

        Assets are transferred one at a time, in the order the source lists
        them. A failed asset is logged and the remaining assets are still
        attempted; the release metadata is never rolled back.

        Args:
            source: Repository the release comes from
            target: Repository to create the release in
            release: Source release

        Returns:
            Number of assets uploaded

        Raises:
            ApiError: If the release cannot be created or its assets cannot be listed
            AssetTransferError: If at least one asset failed to transfer
        """
        logger.info(f"Copying release {release.tag_name} to {target}")
        target_release = self.github_client.create_release(
            target,
            tag_name=release.tag_name,
            name=release.name,
            body=release.body,
        )

        # The asset list embedded in a release payload may be a stale or truncated
        # snapshot; the paginated listing of the source release is authoritative.
        assets = self.github_client.list_release_assets(source, release.id)
        uploaded = 0
        failed: List[str] = []
        for asset in assets:
            try:
                content = self.github_client.get_asset_content(source, asset.id)
                self.github_client.upload_release_asset(
                    target,
                    target_release,
                    name=asset.name,
                    content=content,
                    content_type=asset.content_type,
                )
            except ApiError as e:
                logger.error(f"Error copying asset {asset.name} of release {release.tag_name}: {e}")
                failed.append(asset.name)
                continue

            uploaded += 1
            logger.info(f"Uploaded asset {asset.name} ({len(content)} bytes) to {target}")

        if failed:
            raise AssetTransferError(
                f"Failed to copy {len(failed)} of {len(assets)} assets of release "
                f"{release.tag_name}: {', '.join(failed)}",
                failed_assets=failed,
            )
        return uploaded
