"""
Service layer for repository ingestion.

This package provides the orchestration service and the result assembly
for the liberation pipeline.
"""

from .ingestion_service import RepositoryIngestionService
from .result_assembler import assemble_failure, assemble_success, to_response

__all__ = [
    "RepositoryIngestionService",
    "assemble_failure",
    "assemble_success",
    "to_response",
]
