"""
Archive configuration.
"""

from .settings import DEFAULT_ARCHIVE_SUBPATH, ArchiveConfig

__all__ = [
    "ArchiveConfig",
    "DEFAULT_ARCHIVE_SUBPATH",
]
