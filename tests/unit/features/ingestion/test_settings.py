"""
Tests for ingestion configuration loading.
"""

import os
from unittest.mock import patch

from src.features.ingestion.config.settings import (
    DEFAULT_LIMITS,
    PRIORITY_PATTERNS,
    ExtractionSettings,
    HostSettings,
    RankerSettings,
    get_default_config,
    load_ingestion_config,
)


class TestLoadIngestionConfig:
    """Test environment-driven configuration."""

    def test_values_from_environment(self):
        config = load_ingestion_config()

        assert config.host.shared_token == "test-shared-token"
        assert config.host.api_base == "https://api.github.test"
        assert config.host.user_agent == "repo-liberator-tests"
        assert config.host.max_repo_size_kb == 102400
        assert config.timeout_seconds == 50.0
        assert config.extraction.max_file_chars == 300_000
        assert config.extraction.batch_size == 50

    @patch.dict(os.environ, {"GITHUB_API_BASE": "https://ghe.example.com/api/v3/"})
    def test_api_base_trailing_slash_is_stripped(self):
        assert load_ingestion_config().host.api_base == "https://ghe.example.com/api/v3"

    @patch.dict(os.environ, {"GITHUB_PERSONAL_ACCESS_TOKEN": ""})
    def test_blank_shared_token_is_unset(self):
        assert load_ingestion_config().host.shared_token is None

    @patch.dict(
        os.environ,
        {"MAX_REPO_SIZE_MB": "abc", "EXTRACTION_BATCH_SIZE": "-5", "MAX_FILE_SIZE_CHARS": "0"},
    )
    def test_invalid_numbers_fall_back_to_defaults(self):
        config = load_ingestion_config()

        assert config.host.max_repo_size_mb == DEFAULT_LIMITS["max_repo_size_mb"]
        assert config.extraction.batch_size == DEFAULT_LIMITS["batch_size"]
        assert config.extraction.max_file_chars == DEFAULT_LIMITS["max_file_chars"]

    @patch.dict(os.environ, {"LIBERATION_TIMEOUT_SECONDS": "0.5", "EXTRACTION_WORKERS": "4"})
    def test_float_timeout_and_workers(self):
        config = load_ingestion_config()

        assert config.timeout_seconds == 0.5
        assert config.extraction.workers == 4


class TestSettingsDataclasses:
    """Test settings defaults and validation."""

    def test_defaults(self):
        config = get_default_config()

        assert config.host.shared_token is None
        assert config.host.max_repo_size_mb == 100
        assert config.timeout_seconds == 50.0
        assert config.extraction.batch_size == 50

    def test_extraction_settings_are_clamped(self):
        settings = ExtractionSettings(max_file_chars=0, batch_size=0, workers=0)

        assert settings.batch_size == 1
        assert settings.workers == 1
        assert settings.max_file_chars == DEFAULT_LIMITS["max_file_chars"]

    def test_shared_token_not_in_repr(self):
        assert "secret-token" not in repr(HostSettings(shared_token="secret-token"))

    def test_compiled_patterns_keep_order(self):
        patterns = RankerSettings().compiled_patterns()

        assert len(patterns) == len(PRIORITY_PATTERNS)
        assert patterns[0].pattern == PRIORITY_PATTERNS[0]
