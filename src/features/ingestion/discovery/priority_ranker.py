"""
Structural priority ranking of classified files.

Files that matter most for understanding a project (root manifests, then the
conventional source directories) are moved ahead of everything else so they
survive truncation under a file-count cap.
"""

import logging
from dataclasses import replace
from typing import List, Optional

from ..config.settings import RankerSettings
from ..core.models import ClassifiedFile


class PriorityRanker:
    """Stable sort by the index of the first matching priority pattern."""

    def __init__(self, config: RankerSettings = None):
        self.config = config or RankerSettings()
        self.patterns = self.config.compiled_patterns()
        self.logger = logging.getLogger(__name__)

    def priority_tier(self, clean_path: str) -> Optional[int]:
        """Index of the first pattern matching the path, or None."""
        for index, pattern in enumerate(self.patterns):
            if pattern.search(clean_path):
                return index
        return None

    def rank(self, files: List[ClassifiedFile]) -> List[ClassifiedFile]:
        """
        Rank files by structural importance.

        Priority files come first ordered by pattern index; ties and all
        non-priority files keep their incoming order.

        Args:
            files: Classified files in archive order

        Returns:
            New list with priority_tier populated
        """
        tiered = [
            replace(f, priority_tier=self.priority_tier(f.clean_path)) for f in files
        ]
        fallback = len(self.patterns)
        ranked = sorted(
            tiered,
            key=lambda f: f.priority_tier if f.priority_tier is not None else fallback,
        )

        priority_count = sum(1 for f in ranked if f.is_priority)
        self.logger.info(
            f"Ranked {len(ranked)} files ({priority_count} matched priority patterns)"
        )
        return ranked
