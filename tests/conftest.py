"""
Pytest configuration and fixtures for repository liberation tests.
"""
import io
import os
import zipfile

import pytest

from src.features.ingestion.core.models import RepositoryMetadata

ARCHIVE_ROOT = "octo-widgets-3f9c2e1/"


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Setup test environment variables."""
    test_env = {
        "GITHUB_PERSONAL_ACCESS_TOKEN": "test-shared-token",
        "GITHUB_API_BASE": "https://api.github.test",
        "GITHUB_USER_AGENT": "repo-liberator-tests",
        "MAX_REPO_SIZE_MB": "100",
        "LIBERATION_TIMEOUT_SECONDS": "50",
        "METADATA_TIMEOUT_SECONDS": "15",
        "MAX_FILE_SIZE_CHARS": "300000",
        "EXTRACTION_BATCH_SIZE": "50",
        "EXTRACTION_WORKERS": "1",
        "TRANSPORT": "stdio",
    }

    # Set test environment variables
    original_env = {}
    for key, value in test_env.items():
        original_env[key] = os.environ.get(key)
        os.environ[key] = value

    yield

    # Restore original environment
    for key, value in original_env.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


def build_zip(files, root=ARCHIVE_ROOT, directories=()):
    """
    Build an in-memory zip archive shaped like a hosting snapshot.

    Args:
        files: Mapping of repository-relative path to str or bytes content
        root: Synthetic root folder prepended to every entry ("" for none)
        directories: Extra explicit directory entries
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        if root:
            archive.writestr(root, b"")
        for directory in directories:
            archive.writestr(f"{root}{directory.rstrip('/')}/", b"")
        for path, content in files.items():
            if isinstance(content, str):
                content = content.encode("utf-8")
            archive.writestr(f"{root}{path}", content)
    return buffer.getvalue()


@pytest.fixture
def zip_builder():
    """Provide the snapshot archive builder."""
    return build_zip


@pytest.fixture
def sample_repository_files():
    """Provide a small web project layout with noise directories."""
    return {
        "README.md": "# Widgets\n",
        "package.json": '{"name": "widgets"}',
        "src/App.tsx": "export const App = () => null;\n",
        "src/main.ts": "import './App';\n",
        "docs/guide.md": "Guide\n",
        "node_modules/react/index.js": "module.exports = {};\n",
        ".git/HEAD": "ref: refs/heads/main\n",
        "dist/bundle.js": "!function(){}();\n",
        "assets/logo.png": b"\x89PNG\r\n\x1a\n\x00\x00",
    }


@pytest.fixture
def sample_archive(sample_repository_files):
    """Provide the sample layout as a snapshot zip."""
    return build_zip(sample_repository_files)


@pytest.fixture
def public_metadata():
    """Provide metadata of a small public repository."""
    return RepositoryMetadata(
        name="widgets",
        full_name="octo/widgets",
        description="Widget library",
        default_branch="main",
        size_kb=512,
        is_private=False,
    )


@pytest.fixture
def metadata_payload():
    """Provide a hosting API repository payload."""
    return {
        "name": "widgets",
        "full_name": "octo/widgets",
        "description": "Widget library",
        "default_branch": "main",
        "size": 512,
        "private": False,
    }
