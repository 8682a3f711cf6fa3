"""
Path filtering and classification for archive entries.

This module strips the synthetic archive root, drops entries under denied
directories and keeps only recognized text files.
"""

import logging
import posixpath
from typing import List, Optional

from ..config.settings import ClassifierSettings
from ..core.interfaces import IPathClassifier
from ..core.models import ArchiveEntry, ClassifiedFile


class DirectoryFilter:
    """Filters paths based on denied directory segments."""

    def __init__(self, config: ClassifierSettings = None):
        """
        Initialize directory filter.

        Args:
            config: Classification tables
        """
        self.config = config or ClassifierSettings()
        self.logger = logging.getLogger(__name__)

    def should_exclude(self, clean_path: str) -> bool:
        """
        Check if any directory segment of a path is denied.

        Args:
            clean_path: Path relative to the repository root

        Returns:
            True if the path lives under a denied directory
        """
        directories = clean_path.split("/")[:-1]
        return any(segment in self.config.denied_dirs for segment in directories)


class FileFilter:
    """Keeps only files recognized as text."""

    def __init__(self, config: ClassifierSettings = None):
        """
        Initialize file filter.

        Args:
            config: Classification tables
        """
        self.config = config or ClassifierSettings()
        self.logger = logging.getLogger(__name__)

    def is_text_file(self, filename: str) -> bool:
        """
        Check a filename against the text allow-lists.

        Args:
            filename: Base name of the file

        Returns:
            True if the extension or the conventional name is recognized
        """
        if filename in self.config.text_filenames:
            return True

        stem = filename.split(".", 1)[0].upper()
        if stem and stem in self.config.text_filename_stems:
            return True

        extension = posixpath.splitext(filename)[1].lower()
        return bool(extension) and extension in self.config.text_extensions


class PathClassifier(IPathClassifier):
    """Combines root stripping, directory filtering and file filtering."""

    def __init__(self, config: ClassifierSettings = None):
        """
        Initialize path classifier.

        Args:
            config: Classification tables
        """
        self.config = config or ClassifierSettings()
        self.dir_filter = DirectoryFilter(self.config)
        self.file_filter = FileFilter(self.config)
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def strip_root(raw_path: str, root_prefix: Optional[str]) -> str:
        """
        Remove the synthetic root folder from an archive path.

        Args:
            raw_path: Path as stored in the archive
            root_prefix: Root folder with trailing slash, or None

        Returns:
            Path relative to the repository root
        """
        path = raw_path.replace("\\", "/")
        if root_prefix and path.startswith(root_prefix):
            path = path[len(root_prefix) :]
        return path.lstrip("/")

    def classify_entry(
        self, entry: ArchiveEntry, root_prefix: Optional[str] = None
    ) -> Optional[ClassifiedFile]:
        """
        Classify one archive entry.

        Returns:
            ClassifiedFile, or None if the entry is dropped
        """
        if entry.is_directory:
            return None

        clean_path = self.strip_root(entry.raw_path, root_prefix)
        if not clean_path or clean_path.endswith("/"):
            return None

        segments = clean_path.split("/")
        if any(segment in ("", ".", "..") for segment in segments):
            self.logger.debug(f"Dropped unsafe path: {entry.raw_path}")
            return None

        if self.dir_filter.should_exclude(clean_path):
            return None

        if not self.file_filter.is_text_file(segments[-1]):
            return None

        return ClassifiedFile(clean_path=clean_path, raw_path=entry.raw_path)

    def classify(
        self, entries: List[ArchiveEntry], root_prefix: Optional[str] = None
    ) -> List[ClassifiedFile]:
        """
        Classify archive entries, preserving archive order.

        Args:
            entries: Entries enumerated from the archive index
            root_prefix: Synthetic root folder to strip

        Returns:
            List of kept files
        """
        classified = []
        for entry in entries:
            result = self.classify_entry(entry, root_prefix)
            if result is not None:
                classified.append(result)

        file_count = sum(1 for entry in entries if not entry.is_directory)
        self.logger.info(
            f"Classified {len(classified)} text files out of {file_count} archive files"
        )
        return classified
