"""
Credential selection, privacy authorization and size guarding.

These checks run between the metadata lookup and the archive download so that
no bulk transfer happens for requests that must be refused.
"""

import logging
from typing import Optional

from ..config.settings import HostSettings
from ..core.exceptions import (
    InvalidCredentialError,
    NotAuthenticatedError,
    PrivateRepositoryError,
    RepositoryTooLargeError,
)
from ..core.models import Credential, RepositoryMetadata

logger = logging.getLogger(__name__)


def select_credential(
    caller_token: Optional[str], shared_token: Optional[str]
) -> Credential:
    """
    Pick the credential for hosting API calls.

    A caller-supplied token always wins over the shared server token.

    Raises:
        InvalidCredentialError: If the caller token is blank or malformed
        NotAuthenticatedError: If neither token is available
    """
    if caller_token is not None:
        token = caller_token.strip()
        if token.lower().startswith("bearer "):
            token = token[7:].strip()
        if not token or any(ch.isspace() for ch in token):
            raise InvalidCredentialError("The supplied GitHub token is malformed")
        return Credential(token=token, is_caller_owned=True)

    if shared_token:
        return Credential(token=shared_token, is_caller_owned=False)

    raise NotAuthenticatedError(
        "No GitHub credential available: supply a token or configure "
        "GITHUB_PERSONAL_ACCESS_TOKEN"
    )


def authorize_privacy(metadata: RepositoryMetadata, credential: Credential) -> None:
    """
    Refuse to read private content with the shared credential.

    Raises:
        PrivateRepositoryError: If the repository is private and the credential
            does not belong to the caller
    """
    if metadata.is_private and not credential.is_caller_owned:
        logger.warning(
            f"Refusing private repository {metadata.full_name} without caller token"
        )
        raise PrivateRepositoryError(
            f"Repository {metadata.full_name} is private; connect your own GitHub "
            f"account to liberate it",
            full_name=metadata.full_name,
        )


class SizeGuard:
    """Enforces the compressed repository size ceiling."""

    def __init__(self, config: HostSettings = None):
        self.config = config or HostSettings()

    @property
    def max_kb(self) -> int:
        return self.config.max_repo_size_kb

    @property
    def max_bytes(self) -> int:
        return self.config.max_repo_size_bytes

    def check_metadata(self, metadata: RepositoryMetadata) -> None:
        """
        Reject a repository whose reported size exceeds the ceiling.

        Raises:
            RepositoryTooLargeError: If metadata.size_kb is above the limit
        """
        if metadata.size_kb > self.max_kb:
            raise RepositoryTooLargeError(
                f"Repository too large: {metadata.size_kb / 1024:.1f}MB exceeds "
                f"limit of {self.config.max_repo_size_mb}MB",
                size_kb=metadata.size_kb,
                limit_kb=self.max_kb,
                stage="metadata",
            )

    def check_blob(self, blob: bytes) -> None:
        """
        Re-validate the downloaded archive against the same ceiling.

        Raises:
            RepositoryTooLargeError: If the blob is larger than the limit
        """
        if len(blob) > self.max_bytes:
            raise RepositoryTooLargeError(
                f"Repository archive too large: {len(blob) / (1024 * 1024):.1f}MB "
                f"exceeds limit of {self.config.max_repo_size_mb}MB",
                size_kb=round(len(blob) / 1024, 1),
                limit_kb=self.max_kb,
                stage="download",
            )
