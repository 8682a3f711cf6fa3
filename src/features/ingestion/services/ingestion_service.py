"""
Main repository ingestion service.

This module provides the orchestration service for the liberation pipeline,
running each stage in sequence and short-circuiting on the first failure.
"""

import logging
import time
from typing import Callable, Optional

from ..config.quota import QuotaPolicy
from ..config.settings import IngestionConfig, get_default_config
from ..core.cancellation import Deadline
from ..core.exceptions import IngestionError, UpstreamError
from ..core.interfaces import IRepositoryHost, ProgressCallback
from ..core.models import ExtractionOutcome, IngestionRequest
from ..discovery.archive_reader import ZipArchiveReader
from ..discovery.file_filter import PathClassifier
from ..discovery.priority_ranker import PriorityRanker
from ..extraction.limiter import ExtractionLimiter
from ..repository.access_policy import SizeGuard, authorize_privacy, select_credential
from ..repository.hosting_client import GitHubApiClient
from ..repository.reference import ReferenceResolver
from .result_assembler import assemble_failure, assemble_success


class RepositoryIngestionService:
    """
    Repository ingestion service.

    This service orchestrates the complete pipeline:
    1. Reference resolution and credential selection
    2. Metadata lookup
    3. Privacy authorization and size guarding
    4. Archive download under a single deadline
    5. Archive indexing, path classification and priority ranking
    6. Quota-bounded extraction and result assembly
    """

    def __init__(
        self,
        config: IngestionConfig = None,
        host: Optional[IRepositoryHost] = None,
        quota_policy: Optional[QuotaPolicy] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize ingestion service.

        Args:
            config: Service configuration (uses defaults if None)
            host: Hosting API client (a GitHubApiClient if None)
            quota_policy: Plan limits table (the default table if None)
            clock: Monotonic clock used for elapsed time and the deadline
        """
        self.config = config or get_default_config()

        # Initialize pipeline components
        self.resolver = ReferenceResolver()
        self.host = host or GitHubApiClient(self.config.host)
        self.quota_policy = quota_policy or QuotaPolicy()
        self.size_guard = SizeGuard(self.config.host)
        self.classifier = PathClassifier(self.config.classifier)
        self.ranker = PriorityRanker(self.config.ranker)
        self.limiter = ExtractionLimiter(self.config.extraction)
        self.clock = clock

        self.logger = logging.getLogger(__name__)

    async def liberate(
        self,
        request: IngestionRequest,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ExtractionOutcome:
        """
        Run the pipeline for one request.

        Args:
            request: Inbound request
            progress_callback: Optional (done, total) extraction progress hook

        Returns:
            ExtractionSuccess or ExtractionFailure; never raises for
            pipeline errors
        """
        start_time = self.clock()
        try:
            return await self._run(request, start_time, progress_callback)
        except IngestionError as e:
            elapsed = self.clock() - start_time
            self.logger.warning(
                f"Liberation failed for {request.reference!r}: "
                f"{e.kind.value} ({e.message})"
            )
            return assemble_failure(e, elapsed)
        except Exception as e:
            elapsed = self.clock() - start_time
            self.logger.error(
                f"Unexpected error liberating {request.reference!r}: {e}", exc_info=True
            )
            return assemble_failure(
                UpstreamError(f"Failed to fetch repository: {e}"), elapsed
            )

    async def _run(
        self,
        request: IngestionRequest,
        start_time: float,
        progress_callback: Optional[ProgressCallback],
    ) -> ExtractionOutcome:
        # Step 1: Validate input before any network call
        reference = self.resolver.resolve(request.reference)
        credential = select_credential(
            request.caller_token, self.config.host.shared_token
        )
        plan_type, limits = self.quota_policy.resolve(
            request.plan_type, request.subscription
        )
        self.logger.info(
            f"Liberating {reference.full_name} "
            f"(plan={plan_type}, max_files={limits.max_files}, "
            f"credential={'caller' if credential.is_caller_owned else 'shared'})"
        )

        # Step 2: Metadata before any bulk transfer
        metadata = await self.host.fetch_metadata(reference, credential)

        # Step 3: Authorization and advisory size check
        authorize_privacy(metadata, credential)
        self.size_guard.check_metadata(metadata)

        # Step 4: Download under the pipeline deadline
        deadline = Deadline(self.config.timeout_seconds, clock=self.clock)
        blob = await self.host.download_archive(
            reference,
            credential,
            deadline,
            max_bytes=self.size_guard.max_bytes,
            ref=metadata.default_branch,
        )
        self.size_guard.check_blob(blob)

        # Step 5: Index, classify, rank
        with ZipArchiveReader(blob) as reader:
            deadline.check("open_archive")
            entries = reader.list_entries()
            classified = self.classifier.classify(entries, reader.root_prefix())
            ranked = self.ranker.rank(classified)

            # Step 6: Quota-bounded extraction
            batch = await self.limiter.extract(
                reader,
                ranked,
                limits.max_files,
                deadline,
                progress_callback=progress_callback,
            )

        elapsed = self.clock() - start_time
        outcome = assemble_success(
            metadata, batch, plan_type, limits.max_files, elapsed
        )

        if outcome.result.is_partial:
            self.logger.info(
                f"Returning partial analysis for {metadata.full_name}: "
                f"{len(outcome.result.files)}/{outcome.result.total_eligible_files} "
                f"files ({outcome.result.partial_reason})"
            )
        self.logger.info(
            f"Liberation completed: {metadata.full_name} "
            f"({len(outcome.result.files)} files in {elapsed:.2f}s)"
        )
        return outcome
