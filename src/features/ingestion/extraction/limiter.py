"""
Quota-bounded extraction of ranked files.

Selects the top-ranked files allowed by the caller's quota and decodes them in
fixed-size batches. Per-file problems are logged and skipped; they never fail
the request.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import List, Optional, Union

from ..config.settings import ExtractionSettings
from ..core.cancellation import Deadline
from ..core.interfaces import IArchiveReader, IFileExtractor, ProgressCallback
from ..core.models import ClassifiedFile, ExtractedFile, ExtractionBatchResult, SkippedFile

# UTF-8 encodes a character in at most 4 bytes
MAX_BYTES_PER_CHAR = 4

DecodeOutcome = Union[ExtractedFile, SkippedFile]


class ExtractionLimiter(IFileExtractor):
    """Truncates ranked files to a quota and decodes them in batches."""

    def __init__(self, config: ExtractionSettings = None):
        """
        Initialize extraction limiter.

        Args:
            config: Batch size, worker count and per-file ceiling
        """
        self.config = config or ExtractionSettings()
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def select(ranked_files: List[ClassifiedFile], max_files: int) -> List[ClassifiedFile]:
        """Prefix of the ranked list allowed by max_files (<= 0 means unlimited)."""
        if max_files <= 0:
            return list(ranked_files)
        return list(ranked_files[:max_files])

    async def extract(
        self,
        reader: IArchiveReader,
        ranked_files: List[ClassifiedFile],
        max_files: int,
        deadline: Deadline,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ExtractionBatchResult:
        """
        Decode the selected files batch by batch under the pipeline deadline.

        Args:
            reader: Open archive reader
            ranked_files: Files in rank order
            max_files: Quota from the caller's plan
            deadline: Pipeline deadline, checked before every entry read
            progress_callback: Called with (files_done, files_selected) per batch

        Returns:
            ExtractionBatchResult with files in rank order

        Raises:
            IngestionTimeoutError: If the deadline elapses
        """
        total_eligible = len(ranked_files)
        selected = self.select(ranked_files, max_files)
        if len(selected) < total_eligible:
            self.logger.info(
                f"Limiting files from {total_eligible} to {len(selected)} (plan limit)"
            )

        files: List[ExtractedFile] = []
        skipped: List[SkippedFile] = []
        batch_size = self.config.batch_size
        executor = (
            ThreadPoolExecutor(
                max_workers=self.config.workers, thread_name_prefix="extract"
            )
            if self.config.workers > 1
            else None
        )

        try:
            for start in range(0, len(selected), batch_size):
                batch = selected[start : start + batch_size]
                deadline.check("extract_files")

                outcomes = await deadline.run(
                    asyncio.to_thread(
                        self._decode_batch, reader, batch, deadline, executor
                    ),
                    "extract_files",
                )
                for outcome in outcomes:
                    if isinstance(outcome, ExtractedFile):
                        files.append(outcome)
                    else:
                        skipped.append(outcome)

                done = start + len(batch)
                self.logger.debug(
                    f"Extracted batch {start // batch_size + 1}: {done}/{len(selected)} files"
                )
                if progress_callback:
                    progress_callback(done, len(selected))
        finally:
            if executor is not None:
                executor.shutdown(wait=False, cancel_futures=True)

        self.logger.info(
            f"Extracted {len(files)} files ({len(skipped)} skipped) "
            f"from {len(selected)} selected"
        )
        return ExtractionBatchResult(
            files=files,
            total_eligible_files=total_eligible,
            selected_files=len(selected),
            skipped_files=skipped,
        )

    def _decode_batch(
        self,
        reader: IArchiveReader,
        batch: List[ClassifiedFile],
        deadline: Deadline,
        executor: Optional[ThreadPoolExecutor],
    ) -> List[DecodeOutcome]:
        decode = partial(self.decode_file, reader, deadline)
        if executor is None:
            return [decode(f) for f in batch]
        # map() yields in submission order, keeping rank order
        return list(executor.map(decode, batch))

    def decode_file(
        self, reader: IArchiveReader, deadline: Deadline, file: ClassifiedFile
    ) -> DecodeOutcome:
        """
        Decode one archive entry as UTF-8 text.

        The ceiling is counted in decoded characters; content must stay
        strictly below it.

        Returns:
            ExtractedFile, or SkippedFile when the entry is oversized,
            unreadable or not text

        Raises:
            IngestionTimeoutError: If the deadline elapsed before the read
        """
        deadline.check("extract_files")
        limit = self.config.max_file_chars

        try:
            if reader.entry_size(file.raw_path) > limit * MAX_BYTES_PER_CHAR:
                return self._skip(file, f"{limit} characters or more")
            data = reader.read_bytes(file.raw_path)
        except Exception as e:
            return self._skip(file, f"unreadable: {e}")

        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError:
            return self._skip(file, "not valid UTF-8 text")

        if len(content) >= limit:
            return self._skip(file, f"{limit} characters or more")

        return ExtractedFile(path=file.clean_path, content=content, byte_length=len(data))

    def _skip(self, file: ClassifiedFile, reason: str) -> SkippedFile:
        self.logger.warning(f"Skipping {file.clean_path}: {reason}")
        return SkippedFile(path=file.clean_path, reason=reason)
