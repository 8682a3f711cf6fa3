"""
Content extraction for ranked archive entries.
"""

from .limiter import ExtractionLimiter

__all__ = [
    "ExtractionLimiter",
]
