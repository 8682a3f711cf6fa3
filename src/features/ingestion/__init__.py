"""
Repository ingestion module.

This module provides the liberation pipeline: reference resolution, metadata
lookup, privacy and size checks, archive download, path classification,
priority ranking and quota-bounded extraction.
"""

# Main service layer
from .services.ingestion_service import RepositoryIngestionService

# Core components
from .repository.reference import ReferenceResolver, parse_reference
from .repository.hosting_client import GitHubApiClient
from .discovery import PathClassifier, PriorityRanker, ZipArchiveReader
from .extraction import ExtractionLimiter

# Configuration and models
from .config.settings import IngestionConfig, get_default_config, load_ingestion_config
from .config.quota import PLAN_LIMITS, PlanLimits, QuotaPolicy, resolve_plan_type
from .core.cancellation import Deadline
from .core.models import (
    SourceReference,
    RepositoryMetadata,
    ExtractedFile,
    ExtractionResult,
    ExtractionSuccess,
    ExtractionFailure,
    IngestionRequest,
    SubscriptionSnapshot,
)
from .core.exceptions import ErrorKind, IngestionError

__all__ = [
    # Main service
    "RepositoryIngestionService",
    # Core components
    "ReferenceResolver",
    "parse_reference",
    "GitHubApiClient",
    "PathClassifier",
    "PriorityRanker",
    "ZipArchiveReader",
    "ExtractionLimiter",
    "Deadline",
    # Configuration and models
    "IngestionConfig",
    "get_default_config",
    "load_ingestion_config",
    "PLAN_LIMITS",
    "PlanLimits",
    "QuotaPolicy",
    "resolve_plan_type",
    "SourceReference",
    "RepositoryMetadata",
    "ExtractedFile",
    "ExtractionResult",
    "ExtractionSuccess",
    "ExtractionFailure",
    "IngestionRequest",
    "SubscriptionSnapshot",
    "ErrorKind",
    "IngestionError",
]
