"""Exceptions raised while synchronizing releases."""

from typing import Optional, Sequence


class ReleaseSyncError(Exception):
    """Base class for every failure that aborts a sync run."""
    pass


class ConfigurationError(ReleaseSyncError):
    """Raised when an input is missing or malformed."""
    pass


class NotFoundError(ReleaseSyncError):
    """Raised when the source or target repository does not exist."""
    pass


class RateLimitExhaustedError(ReleaseSyncError):
    """Raised when the remaining API quota drops below the safety floor."""

    def __init__(self, message: str, snapshot=None):
        super().__init__(message)
        self.snapshot = snapshot


class ApiError(ReleaseSyncError):
    """Raised when a GitHub API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransientThrottleError(ApiError):
    """Raised when a call is throttled again after its single retry."""
    pass


class SecondaryRateLimitError(ApiError):
    """Raised on a secondary (abuse detection) rate limit. Never retried."""
    pass


class AssetTransferError(ApiError):
    """Raised after a release's asset loop when one or more assets failed."""

    def __init__(self, message: str, failed_assets: Sequence[str] = ()):
        super().__init__(message)
        self.failed_assets = list(failed_assets)
