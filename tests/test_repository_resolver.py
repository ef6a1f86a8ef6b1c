from __future__ import annotations

import unittest

from _testutil import FakeGitHubClient, ensure_repo_on_path

ensure_repo_on_path()

from release_sync.application.repository_resolver import RepositoryResolver
from release_sync.domain.errors import ConfigurationError, NotFoundError
from release_sync.domain.repository import RepositoryRef


class TestRepositoryResolver(unittest.TestCase):
    def setUp(self) -> None:
        self.client = FakeGitHubClient()
        self.client.add_repo("up/source")
        self.client.add_repo("down/target")
        self.resolver = RepositoryResolver(self.client)

    def test_resolves_explicit_target(self) -> None:
        source, target = self.resolver.resolve("up/source", "down/target")
        self.assertEqual(source, RepositoryRef("up", "source"))
        self.assertEqual(target, RepositoryRef("down", "target"))
        self.assertEqual(
            self.client.calls,
            [("repository_exists", "up/source"), ("repository_exists", "down/target")],
        )

    def test_target_defaults_to_workflow_repository(self) -> None:
        _, target = self.resolver.resolve("up/source", None, default_target_repo="down/target")
        self.assertEqual(target.full_name, "down/target")

    def test_missing_target_without_default_is_configuration_error(self) -> None:
        with self.assertRaises(ConfigurationError):
            self.resolver.resolve("up/source", None, None)
        self.assertEqual(self.client.calls, [])

    def test_malformed_identifier_is_configuration_error(self) -> None:
        with self.assertRaises(ConfigurationError):
            self.resolver.resolve("up-source", "down/target")
        with self.assertRaises(ConfigurationError):
            self.resolver.resolve("up/source", "down/target/extra")

    def test_missing_source_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            self.resolver.resolve("up/missing", "down/target")
        self.assertIn("Source repository up/missing", str(ctx.exception))

    def test_missing_target_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            self.resolver.resolve("up/source", "down/missing")
        self.assertIn("Target repository down/missing", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
