"""
GitHub REST API client for repository metadata and archive snapshots.

This module performs the only two outbound calls of the pipeline: the
metadata lookup and the zipball download. Both are bearer-authenticated and
map response statuses onto the ingestion exception hierarchy.
"""

import logging
from typing import Optional

import httpx

from ..config.settings import HostSettings
from ..core.cancellation import Deadline
from ..core.exceptions import (
    ForbiddenError,
    IngestionError,
    IngestionTimeoutError,
    InvalidCredentialError,
    RateLimitedError,
    RepositoryNotFoundError,
    RepositoryTooLargeError,
    UpstreamError,
)
from ..core.interfaces import IRepositoryHost
from ..core.models import Credential, RepositoryMetadata, SourceReference


def _int_header(response: httpx.Response, name: str) -> Optional[int]:
    value = response.headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP {response.status_code}"
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.reason_phrase or f"HTTP {response.status_code}"


def raise_for_status(response: httpx.Response, reference: SourceReference) -> None:
    """
    Translate a non-2xx hosting API response into an IngestionError.

    The response body must already be read.

    Raises:
        IngestionError: Subclass matching the status code
    """
    status = response.status_code
    if 200 <= status < 300:
        return

    message = _error_message(response)
    full_name = reference.full_name

    if status == 404:
        raise RepositoryNotFoundError(
            f"Repository not found or not accessible: {full_name}", full_name=full_name
        )
    if status == 401:
        raise InvalidCredentialError(
            f"GitHub rejected the credential for {full_name}: {message}"
        )

    remaining = _int_header(response, "X-RateLimit-Remaining")
    if status == 429 or (status == 403 and remaining == 0):
        raise RateLimitedError(
            f"GitHub API rate limit exceeded while accessing {full_name}",
            reset_at=_int_header(response, "X-RateLimit-Reset"),
            retry_after_seconds=_int_header(response, "Retry-After"),
        )
    if status == 403:
        raise ForbiddenError(f"Access to {full_name} is forbidden: {message}")

    raise UpstreamError(f"GitHub API error ({status}): {message}", status=status)


class GitHubApiClient(IRepositoryHost):
    """Hosting API client built on a shared httpx.AsyncClient."""

    def __init__(
        self,
        config: HostSettings = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the API client.

        Args:
            config: Hosting API settings
            http_client: Pre-built client (tests inject one with a MockTransport)
        """
        self.config = config or HostSettings()
        self._http_client = http_client
        self._owns_client = http_client is None
        self.logger = logging.getLogger(__name__)

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.config.api_base,
                timeout=httpx.Timeout(self.config.metadata_timeout_seconds),
                follow_redirects=True,
            )
        return self._http_client

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    def _headers(self, credential: Credential, accept: str) -> dict:
        return {
            "Authorization": f"Bearer {credential.token}",
            "Accept": accept,
            "User-Agent": self.config.user_agent,
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _url(self, path: str) -> str:
        return f"{self.config.api_base}{path}"

    async def fetch_metadata(
        self, reference: SourceReference, credential: Credential
    ) -> RepositoryMetadata:
        """
        Fetch repository metadata.

        Args:
            reference: Resolved repository reference
            credential: Bearer credential for the request

        Returns:
            RepositoryMetadata parsed from the API response

        Raises:
            IngestionError: Subclass matching the failure
        """
        url = self._url(f"/repos/{reference.owner}/{reference.name}")
        self.logger.info(f"Fetching metadata for {reference.full_name}")

        try:
            response = await self.http_client.get(
                url,
                headers=self._headers(credential, "application/vnd.github+json"),
                timeout=self.config.metadata_timeout_seconds,
            )
        except httpx.TimeoutException as e:
            timeout = self.config.metadata_timeout_seconds
            raise IngestionTimeoutError(
                f"Metadata request for {reference.full_name} timed out after {timeout:g}s",
                operation="fetch_metadata",
                timeout_seconds=timeout,
            ) from e
        except httpx.RequestError as e:
            raise UpstreamError(
                f"Metadata request for {reference.full_name} failed: {e}"
            ) from e

        raise_for_status(response, reference)

        try:
            payload = response.json()
            return RepositoryMetadata(
                name=payload["name"],
                full_name=payload.get("full_name") or reference.full_name,
                description=payload.get("description"),
                default_branch=payload.get("default_branch") or "main",
                size_kb=int(payload.get("size") or 0),
                is_private=bool(payload.get("private", False)),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamError(
                f"Unexpected metadata payload for {reference.full_name}: {e}",
                status=response.status_code,
            ) from e

    async def download_archive(
        self,
        reference: SourceReference,
        credential: Credential,
        deadline: Deadline,
        max_bytes: int,
        ref: Optional[str] = None,
    ) -> bytes:
        """
        Download the zipball snapshot under the pipeline deadline.

        The body is streamed and the transfer is aborted as soon as it grows
        past max_bytes. When the deadline elapses the request task is
        cancelled, which closes the connection.

        Raises:
            IngestionTimeoutError: If the deadline elapses
            RepositoryTooLargeError: If the blob exceeds max_bytes
            IngestionError: Subclass matching a non-2xx status
        """
        path = f"/repos/{reference.owner}/{reference.name}/zipball"
        if ref:
            path = f"{path}/{ref}"
        url = self._url(path)

        self.logger.info(
            f"Downloading archive for {reference.full_name} "
            f"(deadline {deadline.remaining():.1f}s remaining)"
        )
        blob = await deadline.run(
            self._stream_archive(url, reference, credential, max_bytes),
            "download_archive",
        )
        self.logger.info(
            f"Downloaded archive for {reference.full_name} "
            f"({len(blob) / 1024:.1f}KB in {deadline.elapsed():.2f}s)"
        )
        return blob

    async def _stream_archive(
        self,
        url: str,
        reference: SourceReference,
        credential: Credential,
        max_bytes: int,
    ) -> bytes:
        headers = self._headers(credential, "application/vnd.github+json")
        # Per-read timeouts are left to the pipeline deadline
        timeout = httpx.Timeout(None, connect=self.config.metadata_timeout_seconds)

        try:
            # The zipball endpoint answers with a redirect to the archive host
            async with self.http_client.stream(
                "GET", url, headers=headers, timeout=timeout, follow_redirects=True
            ) as response:
                if response.status_code >= 300:
                    await response.aread()
                    raise_for_status(response, reference)

                declared = _int_header(response, "Content-Length")
                if declared is not None and declared > max_bytes:
                    raise self._too_large(reference, declared, max_bytes)

                buffer = bytearray()
                async for chunk in response.aiter_bytes():
                    buffer.extend(chunk)
                    if len(buffer) > max_bytes:
                        raise self._too_large(reference, len(buffer), max_bytes)
                return bytes(buffer)
        except IngestionError:
            raise
        except httpx.TimeoutException as e:
            raise IngestionTimeoutError(
                f"Archive connection for {reference.full_name} timed out: {e}",
                operation="download_archive",
                timeout_seconds=self.config.metadata_timeout_seconds,
            ) from e
        except httpx.RequestError as e:
            raise UpstreamError(
                f"Archive download for {reference.full_name} failed: {e}"
            ) from e

    def _too_large(
        self, reference: SourceReference, size_bytes: int, max_bytes: int
    ) -> RepositoryTooLargeError:
        self.logger.warning(
            f"Archive for {reference.full_name} exceeds {max_bytes} bytes, aborting"
        )
        return RepositoryTooLargeError(
            f"Repository archive too large: {size_bytes / (1024 * 1024):.1f}MB "
            f"exceeds limit of {max_bytes / (1024 * 1024):.0f}MB",
            size_kb=round(size_bytes / 1024, 1),
            limit_kb=max_bytes / 1024,
            stage="download",
        )
