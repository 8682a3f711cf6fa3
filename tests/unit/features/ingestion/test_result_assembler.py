"""
Tests for outcome assembly, wire serialization and error categorization.
"""

import json

from src.features.ingestion.core.exceptions import (
    ErrorKind,
    IngestionTimeoutError,
    InvalidReferenceError,
    RateLimitedError,
    RepositoryNotFoundError,
    RepositoryTooLargeError,
    UpstreamError,
    categorize_exception,
    format_error_details,
)
from src.features.ingestion.core.models import (
    ExtractedFile,
    ExtractionBatchResult,
    SkippedFile,
)
from src.features.ingestion.services.result_assembler import (
    assemble_failure,
    assemble_success,
    to_response,
)


def make_batch(file_count=2, total=2, selected=None, skipped=()):
    files = [
        ExtractedFile(path=f"{i}.md", content=f"file {i}", byte_length=6)
        for i in range(file_count)
    ]
    return ExtractionBatchResult(
        files=files,
        total_eligible_files=total,
        selected_files=selected if selected is not None else total,
        skipped_files=list(skipped),
    )


class TestAssembleSuccess:
    """Test cases for success assembly."""

    def test_complete_result(self, public_metadata):
        outcome = assemble_success(public_metadata, make_batch(), "free", 100, 1.23456)

        assert outcome.success is True
        assert outcome.result.is_partial is False
        assert outcome.result.partial_reason is None
        assert outcome.result.elapsed_seconds == 1.235

    def test_plan_limit_reason(self, public_metadata):
        batch = make_batch(file_count=5, total=10, selected=5)

        outcome = assemble_success(public_metadata, batch, "free", 5, 0.5)

        assert outcome.result.is_partial is True
        assert outcome.result.partial_reason == "plan_limit"

    def test_files_skipped_reason(self, public_metadata):
        batch = make_batch(
            file_count=1, total=2, skipped=[SkippedFile("big.txt", "300000 characters or more")]
        )

        outcome = assemble_success(public_metadata, batch, "pro", 500, 0.5)

        assert outcome.result.is_partial is True
        assert outcome.result.partial_reason == "files_skipped"

    def test_response_shape(self, public_metadata):
        outcome = assemble_success(public_metadata, make_batch(), "free", 100, 0.5)

        response = to_response(outcome)

        assert response["success"] is True
        assert response["repository"] == {
            "name": "widgets",
            "fullName": "octo/widgets",
            "description": "Widget library",
            "defaultBranch": "main",
            "sizeKB": 512,
        }
        assert response["files"][0] == {"path": "0.md", "content": "file 0"}
        assert response["fileCount"] == 2
        assert response["totalFilesInRepo"] == 2
        assert response["isPartialAnalysis"] is False
        assert response["planType"] == "free"
        assert response["planLimit"] == 100
        assert "errors" not in response
        json.dumps(response)

    def test_reported_errors_are_capped(self, public_metadata):
        skipped = [SkippedFile(f"{i}.bin.txt", "not valid UTF-8 text") for i in range(7)]
        batch = make_batch(file_count=0, total=7, skipped=skipped)

        response = to_response(assemble_success(public_metadata, batch, "free", 100, 0.1))

        assert len(response["errors"]) == 5
        assert response["errors"][0] == "0.bin.txt: not valid UTF-8 text"


class TestAssembleFailure:
    """Test cases for failure assembly."""

    def test_too_large_failure(self):
        error = RepositoryTooLargeError(
            "too large", size_kb=204800, limit_kb=102400, stage="metadata"
        )

        response = to_response(assemble_failure(error, 0.25))

        assert response["success"] is False
        assert response["errorKind"] == "RepoTooLarge"
        assert response["statusCode"] == 413
        assert response["sizeKB"] == 204800
        assert response["limitKB"] == 102400
        assert response["stage"] == "metadata"
        assert response["category"] == "permanent"

    def test_not_found_failure_names_repository(self):
        error = RepositoryNotFoundError("missing", full_name="octo/widgets")

        outcome = assemble_failure(error, 0.1)

        assert outcome.kind == ErrorKind.REPO_NOT_FOUND
        assert outcome.status_code == 404
        assert outcome.details["repository"] == "octo/widgets"

    def test_timeout_failure(self):
        error = IngestionTimeoutError(
            "late", operation="extract_files", timeout_seconds=50, elapsed_seconds=50.1
        )

        details = format_error_details(error)

        assert details["operation"] == "extract_files"
        assert details["timeoutSeconds"] == 50
        assert details["category"] == "transient"

    def test_rate_limit_details_omit_unknown_fields(self):
        details = format_error_details(RateLimitedError("slow down", reset_at=1700000000))

        assert details["rateLimitReset"] == 1700000000
        assert "retryAfterSeconds" not in details


class TestCategorizeException:
    """Test cases for categorize_exception."""

    def test_categories(self):
        assert categorize_exception(RateLimitedError("x")) == "transient"
        assert categorize_exception(InvalidReferenceError("x")) == "client"
        assert categorize_exception(RepositoryNotFoundError("x")) == "permanent"
        assert categorize_exception(UpstreamError("x", status=502)) == "upstream"
        assert categorize_exception(ValueError("x")) == "unknown"
