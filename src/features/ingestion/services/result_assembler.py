"""
Assembly of pipeline outcomes and their wire representation.
"""

from typing import Any, Dict, List, Optional

from ..core.exceptions import IngestionError, format_error_details
from ..core.models import (
    ExtractionBatchResult,
    ExtractionFailure,
    ExtractionOutcome,
    ExtractionResult,
    ExtractionSuccess,
    RepositoryMetadata,
    SkippedFile,
)

# Skipped-file messages reported back to the caller
MAX_REPORTED_ERRORS = 5

PARTIAL_PLAN_LIMIT = "plan_limit"
PARTIAL_FILES_SKIPPED = "files_skipped"


def _partial_reason(batch: ExtractionBatchResult) -> Optional[str]:
    if len(batch.files) >= batch.total_eligible_files:
        return None
    if batch.was_truncated:
        return PARTIAL_PLAN_LIMIT
    return PARTIAL_FILES_SKIPPED


def assemble_success(
    metadata: RepositoryMetadata,
    batch: ExtractionBatchResult,
    plan_type: str,
    plan_limit: int,
    elapsed_seconds: float,
) -> ExtractionSuccess:
    """Combine metadata and extracted files into a success outcome."""
    result = ExtractionResult(
        files=list(batch.files),
        total_eligible_files=batch.total_eligible_files,
        is_partial=len(batch.files) < batch.total_eligible_files,
        partial_reason=_partial_reason(batch),
        elapsed_seconds=round(elapsed_seconds, 3),
        skipped_files=list(batch.skipped_files),
    )
    return ExtractionSuccess(
        metadata=metadata,
        result=result,
        plan_type=plan_type,
        plan_limit=plan_limit,
    )


def assemble_failure(error: IngestionError, elapsed_seconds: float) -> ExtractionFailure:
    """Convert a stage exception into a failure outcome."""
    return ExtractionFailure(
        kind=error.kind,
        message=error.message,
        status_code=error.status_code,
        elapsed_seconds=round(elapsed_seconds, 3),
        details=format_error_details(error),
    )


def _skipped_messages(skipped: List[SkippedFile]) -> List[str]:
    return [f"{s.path}: {s.reason}" for s in skipped[:MAX_REPORTED_ERRORS]]


def to_response(outcome: ExtractionOutcome) -> Dict[str, Any]:
    """
    Serialize an outcome into the response format consumed by callers.

    Args:
        outcome: ExtractionSuccess or ExtractionFailure

    Returns:
        JSON-serializable dictionary
    """
    if isinstance(outcome, ExtractionFailure):
        response = {
            "success": False,
            "errorKind": outcome.kind.value,
            "message": outcome.message,
            "statusCode": outcome.status_code,
            "elapsedSeconds": outcome.elapsed_seconds,
        }
        response.update(outcome.details)
        return response

    metadata = outcome.metadata
    result = outcome.result
    response = {
        "success": True,
        "repository": {
            "name": metadata.name,
            "fullName": metadata.full_name,
            "description": metadata.description,
            "defaultBranch": metadata.default_branch,
            "sizeKB": metadata.size_kb,
        },
        "files": [{"path": f.path, "content": f.content} for f in result.files],
        "fileCount": len(result.files),
        "totalFilesInRepo": result.total_eligible_files,
        "isPartialAnalysis": result.is_partial,
        "partialReason": result.partial_reason,
        "planType": outcome.plan_type,
        "planLimit": outcome.plan_limit,
        "elapsedSeconds": result.elapsed_seconds,
    }
    if result.skipped_files:
        response["errors"] = _skipped_messages(result.skipped_files)
    return response
