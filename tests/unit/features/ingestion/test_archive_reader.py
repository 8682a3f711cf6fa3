"""
Tests for the zip archive reader.
"""

import pytest

from src.features.ingestion.core.exceptions import CorruptArchiveError, ErrorKind
from src.features.ingestion.discovery.archive_reader import ZipArchiveReader


class TestZipArchiveReader:
    """Test cases for ZipArchiveReader."""

    def test_list_entries_includes_directories(self, zip_builder):
        blob = zip_builder({"src/a.ts": "a"}, directories=["src"])

        with ZipArchiveReader(blob) as reader:
            entries = {e.raw_path: e for e in reader.list_entries()}

        assert entries["octo-widgets-3f9c2e1/"].is_directory is True
        assert entries["octo-widgets-3f9c2e1/src/"].is_directory is True
        assert entries["octo-widgets-3f9c2e1/src/a.ts"].is_directory is False
        assert entries["octo-widgets-3f9c2e1/src/a.ts"].file_size == 1

    def test_root_prefix_detected(self, sample_archive):
        with ZipArchiveReader(sample_archive) as reader:
            assert reader.root_prefix() == "octo-widgets-3f9c2e1/"

    def test_root_prefix_absent_with_top_level_file(self, zip_builder):
        blob = zip_builder({"README.md": "hi", "src/a.ts": "a"}, root="")

        with ZipArchiveReader(blob) as reader:
            assert reader.root_prefix() is None

    def test_root_prefix_absent_with_several_folders(self, zip_builder):
        blob = zip_builder({"src/a.ts": "a", "lib/b.ts": "b"}, root="")

        with ZipArchiveReader(blob) as reader:
            assert reader.root_prefix() is None

    def test_read_bytes_and_entry_size(self, zip_builder):
        blob = zip_builder({"README.md": "# Widgets\n"})

        with ZipArchiveReader(blob) as reader:
            raw_path = "octo-widgets-3f9c2e1/README.md"
            assert reader.read_bytes(raw_path) == b"# Widgets\n"
            assert reader.entry_size(raw_path) == 10

    @pytest.mark.parametrize("blob", [b"", b"this is not a zip archive"])
    def test_corrupt_blob(self, blob):
        with pytest.raises(CorruptArchiveError) as exc_info:
            ZipArchiveReader(blob)

        assert exc_info.value.kind == ErrorKind.CORRUPT_ARCHIVE
        assert exc_info.value.status_code == 500
