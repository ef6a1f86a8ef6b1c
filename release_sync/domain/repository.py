"""Domain entities for GitHub repositories."""

from dataclasses import dataclass

from release_sync.domain.errors import ConfigurationError


@dataclass(frozen=True)
class RepositoryRef:
    """Immutable reference to a repository, identified by owner and name."""

    owner: str
    name: str

    @classmethod
    def parse(cls, identifier: str) -> "RepositoryRef":
        """
        Parse an ``owner/name`` identifier.

        Args:
            identifier: Repository identifier, e.g. "octo-org/octo-repo"

        Returns:
            Parsed repository reference

        Raises:
            ConfigurationError: If the identifier does not contain exactly one
                separator or either segment is empty
        """
        parts = (identifier or "").strip().split("/")
        if len(parts) != 2:
            raise ConfigurationError(
                f"Invalid repository format, expected owner/repo, got {identifier!r}"
            )

        owner, name = (part.strip() for part in parts)
        if not owner or not name:
            raise ConfigurationError(
                f"Invalid repository format, expected owner/repo, got {identifier!r}"
            )
        return cls(owner=owner, name=name)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name
