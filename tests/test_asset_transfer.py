from __future__ import annotations

import dataclasses
import os
import unittest

from _testutil import FakeGitHubClient, api_error, ensure_repo_on_path

ensure_repo_on_path()

from release_sync.application.asset_transfer import AssetTransferEngine
from release_sync.domain.errors import AssetTransferError
from release_sync.domain.release import Asset
from release_sync.domain.repository import RepositoryRef

SOURCE = RepositoryRef("up", "source")
TARGET = RepositoryRef("down", "target")


class TestAssetTransferEngine(unittest.TestCase):
    def setUp(self) -> None:
        self.client = FakeGitHubClient()
        self.client.add_repo("up/source")
        self.client.add_repo("down/target")
        self.engine = AssetTransferEngine(self.client)

    def test_creates_release_with_matching_metadata(self) -> None:
        release = self.client.add_release("up/source", "v1.2.0")

        uploaded = self.engine.copy_release(SOURCE, TARGET, release)

        self.assertEqual(uploaded, 0)
        created = self.client.releases["down/target"][0]
        self.assertEqual(created.tag_name, "v1.2.0")
        self.assertEqual(created.name, release.name)
        self.assertEqual(created.body, release.body)

    def test_assets_are_copied_byte_for_byte_in_order(self) -> None:
        payload = os.urandom(4096) + b"\x00\r\n\xff"
        release = self.client.add_release(
            "up/source",
            "v1",
            {"first.bin": payload, "second.zip": b"PK\x03\x04", "empty.txt": b""},
        )

        uploaded = self.engine.copy_release(SOURCE, TARGET, release)

        self.assertEqual(uploaded, 3)
        self.assertEqual([u[2] for u in self.client.uploads], ["first.bin", "second.zip", "empty.txt"])
        repo, release_id, name, content, _ = self.client.uploads[0]
        self.assertEqual(repo, "down/target")
        self.assertEqual(release_id, self.client.releases["down/target"][0].id)
        self.assertEqual(content, payload)
        self.assertEqual(len(content), len(payload))
        self.assertEqual(self.client.uploads[2][3], b"")

    def test_assets_listed_from_source_repository(self) -> None:
        release = self.client.add_release("up/source", "v1", {"a.bin": b"a"})

        self.engine.copy_release(SOURCE, TARGET, release)

        self.assertIn(("list_release_assets", "up/source", release.id), self.client.calls)
        self.assertTrue(all(c[1] == "up/source" for c in self.client.calls_named("get_asset_content")))

    def test_listed_assets_win_over_embedded_snapshot(self) -> None:
        release = self.client.add_release("up/source", "v1", {"current.bin": b"new"})
        stale = dataclasses.replace(release, assets=(Asset(id=1, name="removed.bin", size=3),))

        self.engine.copy_release(SOURCE, TARGET, stale)

        self.assertEqual([u[2] for u in self.client.uploads], ["current.bin"])

    def test_failed_asset_does_not_stop_remaining_assets(self) -> None:
        release = self.client.add_release("up/source", "v1", {"a.bin": b"a", "b.bin": b"b", "c.bin": b"c"})
        broken = self.client.assets[("up/source", release.id)][1]
        self.client.asset_errors[broken.id] = api_error("download failed", 500)

        with self.assertRaises(AssetTransferError) as ctx:
            self.engine.copy_release(SOURCE, TARGET, release)

        self.assertEqual(ctx.exception.failed_assets, ["b.bin"])
        self.assertEqual([u[2] for u in self.client.uploads], ["a.bin", "c.bin"])
        # metadata stays in place
        self.assertEqual(self.client.tags("down/target"), ["v1"])


if __name__ == "__main__":
    unittest.main()
