"""
Repository reference resolution.

Turns a free-form repository identifier (URL, SSH remote or owner/name
shorthand) into a SourceReference.
"""

import logging
import re
from typing import Optional, Pattern, Sequence

from ..core.exceptions import InvalidReferenceError
from ..core.models import SourceReference

logger = logging.getLogger(__name__)

_NAME = r"[A-Za-z0-9_.\-]+"
# Account names never contain dots, so host-like prefixes cannot pass as owners
_OWNER = r"[A-Za-z0-9_\-]+"

# Tried in order; the first full match wins
REFERENCE_PATTERNS = (
    # https://github.com/owner/name[.git][/tree/main/...][?query][#fragment]
    re.compile(
        rf"^(?:https?://)?(?:www\.)?github\.com/(?P<owner>{_OWNER})/(?P<name>{_NAME}?)"
        r"(?:\.git)?/?(?:[/?#].*)?$",
        re.IGNORECASE,
    ),
    # git@github.com:owner/name.git
    re.compile(
        rf"^git@github\.com:(?P<owner>{_OWNER})/(?P<name>{_NAME}?)(?:\.git)?/?$",
        re.IGNORECASE,
    ),
    # owner/name shorthand
    re.compile(rf"^(?P<owner>{_OWNER})/(?P<name>{_NAME}?)(?:\.git)?$"),
)


class ReferenceResolver:
    """Resolves repository identifiers against an ordered list of patterns."""

    def __init__(self, patterns: Optional[Sequence[Pattern]] = None):
        self.patterns = tuple(patterns or REFERENCE_PATTERNS)

    def resolve(self, reference: str) -> SourceReference:
        """
        Resolve a reference string.

        Args:
            reference: Full URL, SSH remote or owner/name shorthand

        Returns:
            SourceReference with any trailing .git stripped

        Raises:
            InvalidReferenceError: If no pattern matches
        """
        if not isinstance(reference, str) or not reference.strip():
            raise InvalidReferenceError(
                "Repository reference must be a non-empty string", reference=None
            )

        candidate = reference.strip()
        for pattern in self.patterns:
            match = pattern.match(candidate)
            if not match:
                continue

            owner = match.group("owner")
            name = match.group("name")
            if name.lower().endswith(".git"):
                name = name[:-4]
            if not self._is_valid_segment(owner) or not self._is_valid_segment(name):
                continue

            logger.debug(f"Resolved reference {candidate!r} to {owner}/{name}")
            return SourceReference(owner=owner, name=name)

        raise InvalidReferenceError(
            f"Invalid GitHub repository reference: {candidate}", reference=candidate
        )

    @staticmethod
    def _is_valid_segment(segment: str) -> bool:
        return bool(segment) and segment not in (".", "..")


def parse_reference(reference: str) -> SourceReference:
    """Resolve a reference with the default pattern list."""
    return ReferenceResolver().resolve(reference)
