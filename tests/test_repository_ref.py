from __future__ import annotations

import unittest

from _testutil import ensure_repo_on_path

ensure_repo_on_path()

from release_sync.domain.errors import ConfigurationError
from release_sync.domain.repository import RepositoryRef


class TestRepositoryRefParse(unittest.TestCase):
    def test_valid_identifiers(self) -> None:
        for identifier, owner, name in [
            ("octo-org/octo-repo", "octo-org", "octo-repo"),
            ("a/b", "a", "b"),
            ("philips-labs/terraform-aws-github-runner", "philips-labs", "terraform-aws-github-runner"),
            ("  owner/name  ", "owner", "name"),
        ]:
            with self.subTest(identifier=identifier):
                ref = RepositoryRef.parse(identifier)
                self.assertEqual(ref.owner, owner)
                self.assertEqual(ref.name, name)
                self.assertEqual(ref.full_name, f"{owner}/{name}")
                self.assertEqual(str(ref), f"{owner}/{name}")

    def test_rejects_anything_without_exactly_one_separator(self) -> None:
        for identifier in ["", "owner", "owner/repo/extra", "/repo", "owner/", "/", " / ", "a//b"]:
            with self.subTest(identifier=identifier):
                with self.assertRaises(ConfigurationError):
                    RepositoryRef.parse(identifier)

    def test_is_immutable(self) -> None:
        ref = RepositoryRef.parse("owner/name")
        with self.assertRaises(Exception):
            ref.owner = "other"  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
