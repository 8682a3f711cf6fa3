"""
Tests for structural priority ranking.
"""

import pytest

from src.features.ingestion.config.settings import RankerSettings
from src.features.ingestion.core.models import ClassifiedFile
from src.features.ingestion.discovery.priority_ranker import PriorityRanker


def classified(*paths):
    return [ClassifiedFile(clean_path=p, raw_path=f"root/{p}") for p in paths]


class TestPriorityRanker:
    """Test cases for PriorityRanker."""

    def setup_method(self):
        """Setup test fixtures."""
        self.ranker = PriorityRanker()

    @pytest.mark.parametrize(
        "path,tier",
        [
            ("package.json", 0),
            ("tsconfig.json", 1),
            ("vite.config.ts", 2),
            ("tailwind.config.js", 3),
            ("next.config.mjs", 4),
            ("src/App.tsx", 5),
            ("src/deep/nested/util.js", 5),
            ("app/page.tsx", 6),
            ("lib/utils/format.ts", 9),
            ("supabase/functions/fetch/index.ts", 11),
        ],
    )
    def test_priority_tier(self, path, tier):
        assert self.ranker.priority_tier(path) == tier

    @pytest.mark.parametrize(
        "path", ["apps/web/package.json", "README.md", "src/styles.css", "docs/src/a.ts"]
    )
    def test_non_priority_paths(self, path):
        assert self.ranker.priority_tier(path) is None

    def test_rank_orders_by_pattern_index_and_keeps_ties_stable(self):
        files = classified(
            "docs/a.md",
            "src/index.ts",
            "package.json",
            "README.md",
            "src/App.tsx",
            "tsconfig.json",
        )

        ranked = self.ranker.rank(files)

        assert [f.clean_path for f in ranked] == [
            "package.json",
            "tsconfig.json",
            "src/index.ts",
            "src/App.tsx",
            "docs/a.md",
            "README.md",
        ]
        assert [f.priority_tier for f in ranked] == [0, 1, 5, 5, None, None]
        assert ranked[0].raw_path == "root/package.json"

    def test_rank_does_not_mutate_input(self):
        files = classified("README.md", "package.json")

        self.ranker.rank(files)

        assert [f.clean_path for f in files] == ["README.md", "package.json"]
        assert all(f.priority_tier is None for f in files)

    def test_custom_patterns(self):
        ranker = PriorityRanker(RankerSettings(priority_patterns=(r"\.md$",)))

        ranked = ranker.rank(classified("a.ts", "b.md"))

        assert [f.clean_path for f in ranked] == ["b.md", "a.ts"]
