"""
Data models for repository ingestion operations.

This module contains the request-scoped value objects that flow between the
pipeline stages. Nothing here outlives a single pipeline invocation.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .exceptions import ErrorKind


@dataclass(frozen=True)
class SourceReference:
    """Resolved owner/name pair of a hosted repository."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class Credential:
    """Bearer token used for hosting API calls."""

    token: str
    is_caller_owned: bool = False

    def __repr__(self) -> str:
        owner = "caller" if self.is_caller_owned else "shared"
        return f"Credential(owner={owner}, token=***)"


@dataclass(frozen=True)
class RepositoryMetadata:
    """Repository identity, size and visibility as reported by the host."""

    name: str
    full_name: str
    description: Optional[str]
    default_branch: str
    size_kb: int
    is_private: bool


@dataclass(frozen=True)
class ArchiveEntry:
    """One entry of the archive central directory."""

    raw_path: str
    is_directory: bool
    file_size: int = 0
    compressed_size: int = 0


@dataclass(frozen=True)
class ClassifiedFile:
    """An archive entry that passed path classification."""

    clean_path: str
    raw_path: str
    priority_tier: Optional[int] = None

    @property
    def is_priority(self) -> bool:
        return self.priority_tier is not None


@dataclass(frozen=True)
class ExtractedFile:
    """Decoded text content of a selected file."""

    path: str
    content: str
    byte_length: int


@dataclass(frozen=True)
class SkippedFile:
    """A selected file that was excluded during extraction."""

    path: str
    reason: str


@dataclass
class ExtractionBatchResult:
    """Outcome of the extraction limiter stage."""

    files: List[ExtractedFile]
    total_eligible_files: int
    selected_files: int
    skipped_files: List[SkippedFile] = field(default_factory=list)

    @property
    def was_truncated(self) -> bool:
        return self.selected_files < self.total_eligible_files


@dataclass(frozen=True)
class SubscriptionSnapshot:
    """Billing facts used to resolve a caller's quota tier."""

    plan_type: Optional[str] = None
    status: Optional[str] = None
    credits_remaining: Optional[int] = None


@dataclass(frozen=True)
class IngestionRequest:
    """Inbound request for one pipeline run."""

    reference: str
    caller_token: Optional[str] = None
    plan_type: str = "free"
    subscription: Optional[SubscriptionSnapshot] = None


@dataclass
class ExtractionResult:
    """Final extraction outcome of a successful run."""

    files: List[ExtractedFile]
    total_eligible_files: int
    is_partial: bool
    partial_reason: Optional[str]
    elapsed_seconds: float
    skipped_files: List[SkippedFile] = field(default_factory=list)


@dataclass
class ExtractionSuccess:
    """Tagged success outcome of a pipeline run."""

    metadata: RepositoryMetadata
    result: ExtractionResult
    plan_type: str
    plan_limit: int
    success: bool = field(default=True, init=False)


@dataclass
class ExtractionFailure:
    """Tagged failure outcome of a pipeline run."""

    kind: ErrorKind
    message: str
    status_code: int
    elapsed_seconds: float
    details: Dict[str, Any] = field(default_factory=dict)
    success: bool = field(default=False, init=False)


ExtractionOutcome = Union[ExtractionSuccess, ExtractionFailure]
