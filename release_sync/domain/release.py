"""Domain entities for releases, their assets and the API quota."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class Asset:
    """Binary file attached to a release. Content is fetched on demand."""

    id: int
    name: str
    size: int
    content_type: str = DEFAULT_CONTENT_TYPE

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Asset":
        return cls(
            id=int(payload["id"]),
            name=payload["name"],
            size=int(payload.get("size") or 0),
            content_type=payload.get("content_type") or DEFAULT_CONTENT_TYPE,
        )


@dataclass(frozen=True)
class Release:
    """Immutable release entity, matched across repositories by tag name."""

    id: int
    tag_name: str
    name: str = ""
    body: str = ""
    upload_url: str = ""
    draft: bool = False
    prerelease: bool = False
    # As embedded in the API payload; transfers re-list assets from the source
    assets: Tuple[Asset, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Release":
        """
        Build a release from a GitHub REST API payload.

        Args:
            payload: Decoded JSON of a release object

        Returns:
            Release entity; a null name or body becomes an empty string
        """
        return cls(
            id=int(payload["id"]),
            tag_name=payload["tag_name"],
            name=payload.get("name") or "",
            body=payload.get("body") or "",
            upload_url=payload.get("upload_url") or "",
            draft=bool(payload.get("draft")),
            prerelease=bool(payload.get("prerelease")),
            assets=tuple(Asset.from_api(a) for a in payload.get("assets") or []),
        )


@dataclass(frozen=True)
class RateLimitSnapshot:
    """Remaining call quota and quota ceiling at the time of sampling."""

    remaining: int
    limit: int

    def ratio(self) -> float:
        if self.limit <= 0:
            return 1.0
        return self.remaining / self.limit

    def is_below(self, fraction: float) -> bool:
        return self.remaining < self.limit * fraction


class LookupStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class ReleaseLookup:
    """
    Outcome of looking up a release by tag.

    Keeps "the release does not exist" apart from "the lookup itself failed",
    so an API failure is never mistaken for absence.
    """

    status: LookupStatus
    release: Optional[Release] = None
    error: Optional[Exception] = None

    @classmethod
    def found(cls, release: Release) -> "ReleaseLookup":
        return cls(status=LookupStatus.FOUND, release=release)

    @classmethod
    def not_found(cls) -> "ReleaseLookup":
        return cls(status=LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: Exception) -> "ReleaseLookup":
        return cls(status=LookupStatus.FAILED, error=error)
