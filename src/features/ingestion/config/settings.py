"""
Configuration settings and constants for repository ingestion.

This module centralizes the static tables (denied directories, text file
allow-lists, priority patterns) and the numeric limits used throughout the
ingestion pipeline. The tables are only used as defaults of the settings
dataclasses; components receive settings through their constructors.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Pattern, Tuple

logger = logging.getLogger(__name__)


# Directory segments that are never extracted
DENIED_DIRS: FrozenSet[str] = frozenset(
    {
        # Dependency caches
        "node_modules",
        "bower_components",
        "jspm_packages",
        "vendor",
        ".venv",
        "venv",
        ".yarn",
        ".pnpm-store",
        # Version control metadata
        ".git",
        ".svn",
        ".hg",
        # Build output
        "dist",
        "build",
        "out",
        ".next",
        ".nuxt",
        ".output",
        ".svelte-kit",
        "target",
        ".vercel",
        ".netlify",
        # Coverage
        "coverage",
        ".nyc_output",
        "htmlcov",
        # Tool caches
        ".cache",
        ".parcel-cache",
        ".turbo",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".tox",
        ".eggs",
        ".gradle",
        ".idea",
    }
)

# File extensions treated as text
TEXT_EXTENSIONS: FrozenSet[str] = frozenset(
    {
        # JavaScript/TypeScript
        ".ts",
        ".tsx",
        ".js",
        ".jsx",
        ".mjs",
        ".cjs",
        ".vue",
        ".svelte",
        # Styles and markup
        ".css",
        ".scss",
        ".sass",
        ".less",
        ".html",
        ".htm",
        ".svg",
        ".xml",
        # Documentation
        ".md",
        ".mdx",
        ".txt",
        ".rst",
        # Configuration
        ".json",
        ".yml",
        ".yaml",
        ".toml",
        ".ini",
        ".cfg",
        ".conf",
        ".env",
        ".example",
        ".lock",
        # Shell
        ".sh",
        ".bash",
        ".zsh",
        # Other source languages
        ".py",
        ".go",
        ".rs",
        ".java",
        ".kt",
        ".rb",
        ".php",
        ".cs",
        ".c",
        ".h",
        ".cpp",
        ".hpp",
        ".sql",
        ".graphql",
        ".prisma",
    }
)

# Conventional text files recognized by exact name
TEXT_FILENAMES: FrozenSet[str] = frozenset(
    {
        "Dockerfile",
        "Makefile",
        "Procfile",
        "Gemfile",
        "Pipfile",
        "Rakefile",
        "Brewfile",
        "Caddyfile",
        "go.mod",
        "go.sum",
        ".gitignore",
        ".gitattributes",
        ".dockerignore",
        ".npmrc",
        ".nvmrc",
        ".editorconfig",
        ".prettierrc",
        ".prettierignore",
        ".eslintrc",
        ".eslintignore",
        ".babelrc",
        ".browserslistrc",
        ".env.example",
    }
)

# Conventional text files recognized by stem, case-insensitive
TEXT_FILENAME_STEMS: FrozenSet[str] = frozenset(
    {
        "README",
        "LICENSE",
        "LICENCE",
        "COPYING",
        "NOTICE",
        "AUTHORS",
        "CHANGELOG",
        "CONTRIBUTING",
    }
)

# Ordered from most to least structurally important
PRIORITY_PATTERNS: Tuple[str, ...] = (
    r"^package\.json$",
    r"^tsconfig\.json$",
    r"^vite\.config\.(ts|js)$",
    r"^tailwind\.config\.(ts|js)$",
    r"^next\.config\.(js|mjs|ts)$",
    r"^src/.*\.(tsx?|jsx?)$",
    r"^app/.*\.(tsx?|jsx?)$",
    r"^pages/.*\.(tsx?|jsx?)$",
    r"^components/.*\.(tsx?|jsx?)$",
    r"^lib/.*\.(tsx?|jsx?)$",
    r"^hooks/.*\.(tsx?|jsx?)$",
    r"^supabase/.*$",
)

DEFAULT_LIMITS = {
    "max_repo_size_mb": 100,
    "timeout_seconds": 50.0,
    "metadata_timeout_seconds": 15.0,
    "max_file_chars": 300_000,
    "batch_size": 50,
    "workers": 1,
}

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_USER_AGENT = "repo-liberator"


@dataclass(frozen=True)
class HostSettings:
    """Hosting API settings."""

    api_base: str = DEFAULT_API_BASE
    user_agent: str = DEFAULT_USER_AGENT
    shared_token: Optional[str] = field(default=None, repr=False)
    metadata_timeout_seconds: float = DEFAULT_LIMITS["metadata_timeout_seconds"]
    max_repo_size_mb: int = DEFAULT_LIMITS["max_repo_size_mb"]

    @property
    def max_repo_size_kb(self) -> int:
        return self.max_repo_size_mb * 1024

    @property
    def max_repo_size_bytes(self) -> int:
        return self.max_repo_size_mb * 1024 * 1024


@dataclass(frozen=True)
class ClassifierSettings:
    """Path classification tables."""

    denied_dirs: FrozenSet[str] = DENIED_DIRS
    text_extensions: FrozenSet[str] = TEXT_EXTENSIONS
    text_filenames: FrozenSet[str] = TEXT_FILENAMES
    text_filename_stems: FrozenSet[str] = TEXT_FILENAME_STEMS


@dataclass(frozen=True)
class RankerSettings:
    """Priority ranking patterns."""

    priority_patterns: Tuple[str, ...] = PRIORITY_PATTERNS

    def compiled_patterns(self) -> Tuple[Pattern, ...]:
        return tuple(re.compile(pattern) for pattern in self.priority_patterns)


@dataclass(frozen=True)
class ExtractionSettings:
    """Batch extraction settings."""

    max_file_chars: int = DEFAULT_LIMITS["max_file_chars"]
    batch_size: int = DEFAULT_LIMITS["batch_size"]
    workers: int = DEFAULT_LIMITS["workers"]

    def __post_init__(self):
        # Frozen dataclass: clamp through object.__setattr__
        if self.batch_size < 1:
            logger.warning(f"Batch size must be at least 1, got {self.batch_size}")
            object.__setattr__(self, "batch_size", 1)
        if self.workers < 1:
            logger.warning(f"Extraction workers must be at least 1, got {self.workers}")
            object.__setattr__(self, "workers", 1)
        if self.max_file_chars < 1:
            logger.warning(
                f"Max file size must be positive, got {self.max_file_chars}; "
                f"using {DEFAULT_LIMITS['max_file_chars']}"
            )
            object.__setattr__(self, "max_file_chars", DEFAULT_LIMITS["max_file_chars"])


@dataclass(frozen=True)
class IngestionConfig:
    """Main configuration for the ingestion pipeline."""

    host: HostSettings = field(default_factory=HostSettings)
    classifier: ClassifierSettings = field(default_factory=ClassifierSettings)
    ranker: RankerSettings = field(default_factory=RankerSettings)
    extraction: ExtractionSettings = field(default_factory=ExtractionSettings)
    timeout_seconds: float = DEFAULT_LIMITS["timeout_seconds"]


def get_default_config() -> IngestionConfig:
    """Get default configuration instance."""
    return IngestionConfig()


def _env_number(name: str, default, cast=int):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning(f"Invalid value for {name}: {raw!r}, using default {default}")
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive, got {value}; using default {default}")
        return default
    return value


def load_ingestion_config() -> IngestionConfig:
    """
    Load ingestion configuration from environment variables with fallback defaults.

    Environment Variables:
        GITHUB_PERSONAL_ACCESS_TOKEN: Shared server token (default: unset)
        GITHUB_API_BASE: Hosting API base URL (default: https://api.github.com)
        GITHUB_USER_AGENT: User-Agent header value (default: repo-liberator)
        MAX_REPO_SIZE_MB: Compressed repository size ceiling (default: 100)
        LIBERATION_TIMEOUT_SECONDS: Deadline from download onwards (default: 50)
        METADATA_TIMEOUT_SECONDS: Metadata request timeout (default: 15)
        MAX_FILE_SIZE_CHARS: Per-file character ceiling (default: 300000)
        EXTRACTION_BATCH_SIZE: Files decoded per batch (default: 50)
        EXTRACTION_WORKERS: Decode worker threads (default: 1)

    Returns:
        IngestionConfig: Configured ingestion parameters
    """
    shared_token = os.getenv("GITHUB_PERSONAL_ACCESS_TOKEN") or None

    host = HostSettings(
        api_base=os.getenv("GITHUB_API_BASE", DEFAULT_API_BASE).rstrip("/"),
        user_agent=os.getenv("GITHUB_USER_AGENT", DEFAULT_USER_AGENT),
        shared_token=shared_token,
        metadata_timeout_seconds=_env_number(
            "METADATA_TIMEOUT_SECONDS",
            DEFAULT_LIMITS["metadata_timeout_seconds"],
            float,
        ),
        max_repo_size_mb=_env_number(
            "MAX_REPO_SIZE_MB", DEFAULT_LIMITS["max_repo_size_mb"]
        ),
    )
    extraction = ExtractionSettings(
        max_file_chars=_env_number(
            "MAX_FILE_SIZE_CHARS", DEFAULT_LIMITS["max_file_chars"]
        ),
        batch_size=_env_number("EXTRACTION_BATCH_SIZE", DEFAULT_LIMITS["batch_size"]),
        workers=_env_number("EXTRACTION_WORKERS", DEFAULT_LIMITS["workers"]),
    )
    config = IngestionConfig(
        host=host,
        extraction=extraction,
        timeout_seconds=_env_number(
            "LIBERATION_TIMEOUT_SECONDS", DEFAULT_LIMITS["timeout_seconds"], float
        ),
    )

    logger.info(
        f"Loaded ingestion configuration: "
        f"max_repo={host.max_repo_size_mb}MB, timeout={config.timeout_seconds}s, "
        f"batch={extraction.batch_size}, workers={extraction.workers}, "
        f"shared_token={'set' if shared_token else 'unset'}"
    )
    return config
