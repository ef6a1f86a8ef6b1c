"""GitHub REST API client with rate limiting and retry logic."""

import time
import logging
import os
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

import requests

from release_sync.domain.errors import (
    ApiError,
    SecondaryRateLimitError,
    TransientThrottleError,
)
from release_sync.domain.release import (
    DEFAULT_CONTENT_TYPE,
    Asset,
    RateLimitSnapshot,
    Release,
    ReleaseLookup,
)
from release_sync.domain.repository import RepositoryRef

logger = logging.getLogger(__name__)


class GitHubRestClient:
    """Client for the GitHub REST API covering releases, assets and quota."""

    # Primary rate limit responses are retried once after the delay GitHub
    # suggests. Secondary (abuse detection) limits are never retried.

    DEFAULT_API_URL = "https://api.github.com"
    DEFAULT_UPLOADS_URL = "https://uploads.github.com"
    API_VERSION = "2022-11-28"
    USER_AGENT = "release-sync"
    PER_PAGE = 100
    MAX_RETRIES = 3
    MAX_THROTTLE_RETRIES = 1
    IDEMPOTENT_METHODS = ("GET", "HEAD", "PUT", "DELETE", "OPTIONS")
    RETRY_DELAY_SECONDS = 1
    REQUEST_TIMEOUT = 30
    TRANSFER_TIMEOUT = 300

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize GitHub REST client.

        Args:
            token: GitHub token. If None, uses GITHUB_TOKEN env var.
            api_url: API base URL. If None, uses GITHUB_API_URL or api.github.com.
            session: Optional pre-built session (used by tests)
        """
        if token is None:
            token = os.getenv("GITHUB_TOKEN")
        if api_url is None:
            api_url = os.getenv("GITHUB_API_URL") or self.DEFAULT_API_URL

        self.token = token
        self.api_url = api_url.rstrip("/")
        self.session = session or requests.Session()
        self.headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.API_VERSION,
            "User-Agent": self.USER_AGENT,
        }

        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"

    def _repo_url(self, repo: RepositoryRef, path: str = "") -> str:
        return f"{self.api_url}/repos/{repo.owner}/{repo.name}{path}"

    def _uploads_url(self) -> str:
        """Base URL for asset uploads; GitHub Enterprise serves them under <host>/api/uploads."""
        if self.api_url.endswith("/api/v3"):
            return self.api_url[: -len("/v3")] + "/uploads"
        return self.DEFAULT_UPLOADS_URL

    @staticmethod
    def _is_secondary_rate_limit(response: requests.Response) -> bool:
        return "secondary rate limit" in (response.text or "").lower()

    @staticmethod
    def _is_throttled(response: requests.Response) -> bool:
        if response.status_code not in (403, 429):
            return False
        if response.headers.get("X-RateLimit-Remaining") == "0":
            return True
        return "Retry-After" in response.headers

    @classmethod
    def _can_retry(cls, method: str, error: requests.exceptions.RequestException) -> bool:
        """
        Decide whether a failed request may be sent again.

        A POST that timed out while waiting for the reply may already have
        been applied (a created release, an uploaded asset), so it is only
        resent when the connection itself could not be established.
        """
        if method.upper() in cls.IDEMPOTENT_METHODS:
            return True
        return isinstance(error, requests.exceptions.ConnectionError)

    @staticmethod
    def _throttle_delay(response: requests.Response) -> int:
        """Seconds to wait before retrying, as suggested by the response headers."""
        retry_after = response.headers.get("Retry-After")
        if retry_after and retry_after.isdigit():
            return max(int(retry_after), 1)

        reset_time = int(response.headers.get("X-RateLimit-Reset", 0) or 0)
        return max(reset_time - int(time.time()), 1)

    def _request(
        self,
        method: str,
        url: str,
        expected: Iterable[int] = (200,),
        **kwargs: Any,
    ) -> requests.Response:
        """
        Execute a request with throttling and retry logic.

        Args:
            method: HTTP method
            url: Absolute URL
            expected: Status codes returned to the caller instead of raising
            **kwargs: Passed through to ``requests.Session.request``

        Returns:
            Response whose status code is in ``expected``

        Raises:
            TransientThrottleError: If the call is throttled again after its retry
            SecondaryRateLimitError: If GitHub reports a secondary rate limit
            ApiError: On any other failure
        """
        expected = tuple(expected)
        headers = dict(self.headers)
        headers.update(kwargs.pop("headers", None) or {})
        kwargs.setdefault("timeout", self.REQUEST_TIMEOUT)

        attempt = 0
        throttle_retries = 0
        while True:
            try:
                response = self.session.request(method, url, headers=headers, **kwargs)
            except requests.exceptions.RequestException as e:
                attempt += 1
                if attempt < self.MAX_RETRIES and self._can_retry(method, e):
                    delay = self.RETRY_DELAY_SECONDS * (2 ** (attempt - 1))
                    logger.warning(
                        f"Request {method} {url} failed (attempt {attempt}/{self.MAX_RETRIES}): {e}. "
                        f"Retrying in {delay}s..."
                    )
                    time.sleep(delay)
                    continue
                raise ApiError(f"Request {method} {url} failed after {attempt} attempts: {e}") from e

            if response.status_code in expected:
                return response

            if response.status_code in (403, 429) and self._is_secondary_rate_limit(response):
                logger.warning(f"SecondaryRateLimit detected for request {method} {url}")
                raise SecondaryRateLimitError(
                    f"Secondary rate limit hit for {method} {url}",
                    status_code=response.status_code,
                )

            if self._is_throttled(response):
                logger.warning(f"Request quota exhausted for request {method} {url}")
                if throttle_retries < self.MAX_THROTTLE_RETRIES:
                    throttle_retries += 1
                    wait_time = self._throttle_delay(response)
                    logger.info(f"Retrying after {wait_time} seconds!")
                    time.sleep(wait_time)
                    continue
                raise TransientThrottleError(
                    f"Request quota exhausted for {method} {url}",
                    status_code=response.status_code,
                )

            raise ApiError(
                f"GitHub API error for {method} {url}: {response.status_code}: {response.text[:2000]}",
                status_code=response.status_code,
            )

    def _paginate(self, url: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Fetch every page of a list endpoint by following ``Link: rel="next"``."""
        params = dict(params or {})
        params.setdefault("per_page", self.PER_PAGE)

        items: List[Dict[str, Any]] = []
        next_url: Optional[str] = url
        while next_url:
            response = self._request("GET", next_url, params=params)
            items.extend(response.json())
            next_url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            params = None
        return items

    def repository_exists(self, repo: RepositoryRef) -> bool:
        """Return True if the repository can be read. Any failure counts as absent."""
        try:
            response = self._request("GET", self._repo_url(repo), expected=(200, 404))
        except ApiError as e:
            logger.warning(f"Lookup of repository {repo} failed: {e}")
            return False
        return response.status_code == 200

    def list_releases(self, repo: RepositoryRef) -> List[Release]:
        """List all releases of a repository, in the order GitHub returns them (newest first)."""
        payloads = self._paginate(self._repo_url(repo, "/releases"))
        return [Release.from_api(payload) for payload in payloads]

    def get_release_by_tag(self, repo: RepositoryRef, tag: str) -> ReleaseLookup:
        url = self._repo_url(repo, f"/releases/tags/{quote(tag, safe='')}")
        try:
            response = self._request("GET", url, expected=(200, 404))
        except ApiError as e:
            return ReleaseLookup.failed(e)

        if response.status_code == 404:
            return ReleaseLookup.not_found()
        return ReleaseLookup.found(Release.from_api(response.json()))

    def delete_release(self, repo: RepositoryRef, release_id: int) -> None:
        self._request("DELETE", self._repo_url(repo, f"/releases/{release_id}"), expected=(204,))

    def create_release(self, repo: RepositoryRef, tag_name: str, name: str, body: str) -> Release:
        """Create a published (non-draft, non-prerelease) release."""
        payload = {
            "tag_name": tag_name,
            "name": name,
            "body": body,
            "draft": False,
            "prerelease": False,
        }
        response = self._request("POST", self._repo_url(repo, "/releases"), expected=(201,), json=payload)
        return Release.from_api(response.json())

    def list_release_assets(self, repo: RepositoryRef, release_id: int) -> List[Asset]:
        payloads = self._paginate(self._repo_url(repo, f"/releases/{release_id}/assets"))
        return [Asset.from_api(payload) for payload in payloads]

    def get_asset_content(self, repo: RepositoryRef, asset_id: int) -> bytes:
        """Download the raw bytes of a release asset (follows the storage redirect)."""
        response = self._request(
            "GET",
            self._repo_url(repo, f"/releases/assets/{asset_id}"),
            headers={"Accept": "application/octet-stream"},
            allow_redirects=True,
            timeout=self.TRANSFER_TIMEOUT,
        )
        return response.content

    def upload_release_asset(
        self,
        repo: RepositoryRef,
        release: Release,
        name: str,
        content: bytes,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> Asset:
        """
        Upload bytes as a new asset of a release.

        Args:
            repo: Repository owning the release
            release: Release to attach the asset to
            name: Asset file name
            content: Exact bytes to upload
            content_type: MIME type recorded for the asset

        Returns:
            The created asset
        """
        # Example: https://uploads.github.com/repos/{owner}/{repo}/releases/{id}/assets{?name,label}
        upload_url = release.upload_url.split("{")[0]
        if not upload_url:
            upload_url = (
                f"{self._uploads_url()}/repos/{repo.owner}/{repo.name}"
                f"/releases/{release.id}/assets"
            )

        response = self._request(
            "POST",
            upload_url,
            expected=(201,),
            params={"name": name},
            data=content,
            headers={
                "Content-Type": content_type or DEFAULT_CONTENT_TYPE,
                "Content-Length": str(len(content)),
            },
            timeout=self.TRANSFER_TIMEOUT,
        )
        return Asset.from_api(response.json())

    def get_rate_limit(self) -> RateLimitSnapshot:
        """Sample the current core API quota. Never cached."""
        response = self._request("GET", f"{self.api_url}/rate_limit")
        data = response.json()
        rate = data.get("resources", {}).get("core") or data.get("rate", {})
        return RateLimitSnapshot(
            remaining=int(rate.get("remaining", 0)),
            limit=int(rate.get("limit", 0)),
        )
