"""
Zip archive access for repository snapshots.

Entries are enumerated from the central directory so classification can
discard most of them before any content is decompressed.
"""

import io
import logging
import zipfile
from typing import List, Optional

from ..core.exceptions import CorruptArchiveError
from ..core.interfaces import IArchiveReader
from ..core.models import ArchiveEntry


class ZipArchiveReader(IArchiveReader):
    """Indexed reader over an in-memory zip blob."""

    def __init__(self, blob: bytes):
        """
        Open the blob as a zip archive.

        Args:
            blob: Raw archive bytes

        Raises:
            CorruptArchiveError: If the blob is not a readable zip archive
        """
        self.logger = logging.getLogger(__name__)
        if not blob:
            raise CorruptArchiveError("Downloaded archive is empty")

        try:
            self._zip = zipfile.ZipFile(io.BytesIO(blob))
            self._infos = self._zip.infolist()
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, OSError) as e:
            raise CorruptArchiveError(f"Downloaded archive is not a valid zip: {e}")

        self._entries: Optional[List[ArchiveEntry]] = None
        self._root_prefix: Optional[str] = None
        self._root_resolved = False
        self.logger.debug(f"Opened archive with {len(self._infos)} index entries")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self._zip.close()

    def list_entries(self) -> List[ArchiveEntry]:
        if self._entries is None:
            self._entries = [
                ArchiveEntry(
                    raw_path=info.filename,
                    is_directory=info.is_dir(),
                    file_size=info.file_size,
                    compressed_size=info.compress_size,
                )
                for info in self._infos
            ]
        return self._entries

    def root_prefix(self) -> Optional[str]:
        """
        Detect the synthetic root folder snapshot archives prepend.

        Returns:
            The shared first segment including its trailing slash, or None when
            entries do not all live under one folder
        """
        if self._root_resolved:
            return self._root_prefix

        self._root_resolved = True
        first_segments = set()
        for entry in self.list_entries():
            head, sep, _ = entry.raw_path.partition("/")
            if not sep:
                # A top-level file means there is no synthetic root
                return None
            first_segments.add(head)
            if len(first_segments) > 1:
                return None

        if len(first_segments) == 1:
            self._root_prefix = f"{first_segments.pop()}/"
        return self._root_prefix

    def read_bytes(self, raw_path: str) -> bytes:
        """
        Decompress one entry.

        Raises:
            KeyError: If the entry does not exist
            zipfile.BadZipFile: If the entry data is corrupt
        """
        return self._zip.read(raw_path)

    def entry_size(self, raw_path: str) -> int:
        return self._zip.getinfo(raw_path).file_size
