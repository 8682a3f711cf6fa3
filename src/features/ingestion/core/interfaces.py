"""
Abstract base classes and interfaces for ingestion pipeline components.

This module defines the contracts the pipeline stages implement, enabling
loose coupling and easy testing through dependency injection.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from .cancellation import Deadline
from .models import (
    ArchiveEntry,
    ClassifiedFile,
    Credential,
    ExtractionBatchResult,
    RepositoryMetadata,
    SourceReference,
)

ProgressCallback = Callable[[int, int], None]


class IRepositoryHost(ABC):
    """Interface for the hosting platform API."""

    @abstractmethod
    async def fetch_metadata(
        self, reference: SourceReference, credential: Credential
    ) -> RepositoryMetadata:
        """
        Fetch repository metadata before any bulk transfer.

        Args:
            reference: Resolved repository reference
            credential: Bearer credential for the request

        Returns:
            RepositoryMetadata for the repository

        Raises:
            IngestionError: Subclass matching the response status
        """
        pass

    @abstractmethod
    async def download_archive(
        self,
        reference: SourceReference,
        credential: Credential,
        deadline: Deadline,
        max_bytes: int,
        ref: Optional[str] = None,
    ) -> bytes:
        """
        Download the repository snapshot as a zip blob.

        Args:
            reference: Resolved repository reference
            credential: Bearer credential for the request
            deadline: Pipeline deadline; the transfer is cancelled when it elapses
            max_bytes: Hard ceiling for the blob size
            ref: Branch or commit to snapshot (host default when None)

        Returns:
            Raw archive bytes

        Raises:
            IngestionTimeoutError: If the deadline elapses
            RepositoryTooLargeError: If the blob exceeds max_bytes
        """
        pass


class IArchiveReader(ABC):
    """Interface for indexed archive access."""

    @abstractmethod
    def list_entries(self) -> List[ArchiveEntry]:
        """Enumerate entries from the archive index without decoding them."""
        pass

    @abstractmethod
    def root_prefix(self) -> Optional[str]:
        """Synthetic root folder shared by every entry, if any."""
        pass

    @abstractmethod
    def read_bytes(self, raw_path: str) -> bytes:
        """Decompress a single entry."""
        pass

    @abstractmethod
    def entry_size(self, raw_path: str) -> int:
        """Uncompressed size of an entry as recorded in the index."""
        pass


class IPathClassifier(ABC):
    """Interface for path classification."""

    @abstractmethod
    def classify(
        self, entries: List[ArchiveEntry], root_prefix: Optional[str] = None
    ) -> List[ClassifiedFile]:
        """Keep recognized text files outside denied directories."""
        pass


class IFileExtractor(ABC):
    """Interface for the quota-bounded extraction stage."""

    @abstractmethod
    async def extract(
        self,
        reader: IArchiveReader,
        ranked_files: List[ClassifiedFile],
        max_files: int,
        deadline: Deadline,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ExtractionBatchResult:
        """Decode the top-ranked files within the quota."""
        pass
