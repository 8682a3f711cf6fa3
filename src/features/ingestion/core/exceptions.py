"""
Custom exceptions for repository ingestion operations.

This module defines the exception hierarchy raised by the ingestion pipeline
stages. Every exception carries an ErrorKind and an HTTP-style status code so
the service layer can turn it into a tagged failure without parsing messages.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Request-level failure kinds reported by the ingestion pipeline."""

    INVALID_REFERENCE = "InvalidReference"
    NOT_AUTHENTICATED = "NotAuthenticated"
    INVALID_CREDENTIAL = "InvalidCredential"
    REPO_NOT_FOUND = "RepoNotFound"
    FORBIDDEN = "Forbidden"
    PRIVATE_REPO_REQUIRES_OWN_TOKEN = "PrivateRepoRequiresOwnToken"
    RATE_LIMITED = "RateLimited"
    REPO_TOO_LARGE = "RepoTooLarge"
    TIMEOUT = "Timeout"
    CORRUPT_ARCHIVE = "CorruptArchive"
    UPSTREAM_ERROR = "UpstreamError"


STATUS_CODES = {
    ErrorKind.INVALID_REFERENCE: 400,
    ErrorKind.NOT_AUTHENTICATED: 401,
    ErrorKind.INVALID_CREDENTIAL: 401,
    ErrorKind.PRIVATE_REPO_REQUIRES_OWN_TOKEN: 403,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.REPO_NOT_FOUND: 404,
    ErrorKind.TIMEOUT: 408,
    ErrorKind.REPO_TOO_LARGE: 413,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.CORRUPT_ARCHIVE: 500,
    ErrorKind.UPSTREAM_ERROR: 500,
}


class IngestionError(Exception):
    """Base exception for all ingestion pipeline errors."""

    kind: ErrorKind = ErrorKind.UPSTREAM_ERROR

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


class InvalidReferenceError(IngestionError):
    """Raised when a repository reference cannot be resolved to owner/name."""

    kind = ErrorKind.INVALID_REFERENCE

    def __init__(self, message: str, reference: Optional[str] = None):
        super().__init__(message)
        self.reference = reference


class NotAuthenticatedError(IngestionError):
    """Raised when no credential at all is available for the hosting API."""

    kind = ErrorKind.NOT_AUTHENTICATED


class InvalidCredentialError(IngestionError):
    """Raised when a credential is malformed, expired or revoked."""

    kind = ErrorKind.INVALID_CREDENTIAL


class RepositoryNotFoundError(IngestionError):
    """Raised when the hosting API reports the repository does not exist."""

    kind = ErrorKind.REPO_NOT_FOUND

    def __init__(self, message: str, full_name: Optional[str] = None):
        super().__init__(message)
        self.full_name = full_name


class ForbiddenError(IngestionError):
    """Raised on a 403 that is not a rate-limit signal."""

    kind = ErrorKind.FORBIDDEN


class PrivateRepositoryError(IngestionError):
    """Raised when private content would be read with the shared credential."""

    kind = ErrorKind.PRIVATE_REPO_REQUIRES_OWN_TOKEN

    def __init__(self, message: str, full_name: Optional[str] = None):
        super().__init__(message)
        self.full_name = full_name


class RateLimitedError(IngestionError):
    """Raised when the hosting API signals an exhausted request quota."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(
        self,
        message: str,
        reset_at: Optional[int] = None,
        retry_after_seconds: Optional[int] = None,
    ):
        super().__init__(message)
        self.reset_at = reset_at
        self.retry_after_seconds = retry_after_seconds


class RepositoryTooLargeError(IngestionError):
    """Raised when repository size exceeds the configured ceiling."""

    kind = ErrorKind.REPO_TOO_LARGE

    def __init__(
        self,
        message: str,
        size_kb: Optional[float] = None,
        limit_kb: Optional[float] = None,
        stage: str = "metadata",
    ):
        super().__init__(message)
        self.size_kb = size_kb
        self.limit_kb = limit_kb
        self.stage = stage


class IngestionTimeoutError(IngestionError):
    """Raised when the pipeline deadline elapses."""

    kind = ErrorKind.TIMEOUT

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        elapsed_seconds: Optional[float] = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        self.elapsed_seconds = elapsed_seconds


class CorruptArchiveError(IngestionError):
    """Raised when the downloaded blob cannot be opened as a zip archive."""

    kind = ErrorKind.CORRUPT_ARCHIVE


class UpstreamError(IngestionError):
    """Raised for unexpected hosting API responses or transport failures."""

    kind = ErrorKind.UPSTREAM_ERROR

    def __init__(
        self, message: str, status: Optional[int] = None, details: dict = None
    ):
        super().__init__(message, details)
        self.status = status


# Exception mapping for easier categorization
TRANSIENT_ERRORS = (IngestionTimeoutError, RateLimitedError)
CLIENT_ERRORS = (
    InvalidReferenceError,
    NotAuthenticatedError,
    InvalidCredentialError,
    PrivateRepositoryError,
    ForbiddenError,
)
PERMANENT_ERRORS = (
    RepositoryNotFoundError,
    RepositoryTooLargeError,
    CorruptArchiveError,
)


def categorize_exception(exception: Exception) -> str:
    """
    Categorize an exception so callers can decide whether to retry.

    Args:
        exception: The exception to categorize

    Returns:
        Category name as string
    """
    if isinstance(exception, TRANSIENT_ERRORS):
        return "transient"
    elif isinstance(exception, CLIENT_ERRORS):
        return "client"
    elif isinstance(exception, PERMANENT_ERRORS):
        return "permanent"
    elif isinstance(exception, IngestionError):
        return "upstream"
    else:
        return "unknown"


def format_error_details(exception: IngestionError) -> dict:
    """
    Collect the kind-specific fields of an exception for the wire response.

    Args:
        exception: IngestionError instance

    Returns:
        Dictionary with camelCase kind-specific fields
    """
    details = {}

    if isinstance(exception, RepositoryTooLargeError):
        details["sizeKB"] = exception.size_kb
        details["limitKB"] = exception.limit_kb
        details["stage"] = exception.stage
    elif isinstance(exception, RateLimitedError):
        if exception.reset_at is not None:
            details["rateLimitReset"] = exception.reset_at
        if exception.retry_after_seconds is not None:
            details["retryAfterSeconds"] = exception.retry_after_seconds
    elif isinstance(exception, IngestionTimeoutError):
        details["operation"] = exception.operation
        details["timeoutSeconds"] = exception.timeout_seconds
    elif isinstance(exception, UpstreamError) and exception.status is not None:
        details["upstreamStatus"] = exception.status

    if hasattr(exception, "full_name") and exception.full_name:
        details["repository"] = exception.full_name
    if exception.details:
        details["additionalDetails"] = exception.details

    details["category"] = categorize_exception(exception)
    return details
