#!/usr/bin/env python3
"""Script to copy GitHub releases and their assets from one repository to another."""

import logging
import sys
import os

# Add the project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from release_sync.infrastructure.config import SyncSettings
from release_sync.infrastructure.github_client import GitHubRestClient
from release_sync.application.sync_service import ReleaseSyncService

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def annotate_failure(message: str) -> None:
    """Surface the failure as an error annotation on the workflow run."""
    if os.getenv("GITHUB_ACTIONS") == "true":
        print(f"::error::{message}", flush=True)


def main():
    """Sync releases from the source repository to the target repository."""
    try:
        settings = SyncSettings.from_env()
        logging.getLogger().setLevel(settings.log_level)

        github_client = GitHubRestClient(token=settings.github_token, api_url=settings.api_url)
        service = ReleaseSyncService(github_client, delete_releases=settings.delete_releases)

        report = service.run(
            settings.source_repo,
            target_repo=settings.target_repo,
            default_target_repo=settings.default_target_repo,
            start_from=settings.start_from,
        )
        logger.info(f"Release sync finished: {report.processed} releases processed")
        return 0

    except Exception as e:
        logger.error(f"Release sync failed: {e}", exc_info=True)
        annotate_failure(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
