"""
Archive discovery for repository snapshots.

This package provides archive indexing, path classification and priority
ranking used ahead of content extraction.
"""

from .archive_reader import ZipArchiveReader
from .file_filter import DirectoryFilter, FileFilter, PathClassifier
from .priority_ranker import PriorityRanker

__all__ = [
    "ZipArchiveReader",
    "DirectoryFilter",
    "FileFilter",
    "PathClassifier",
    "PriorityRanker",
]
