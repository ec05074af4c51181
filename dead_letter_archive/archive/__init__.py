"""
Writing and migrating dead letter archive objects.
"""

from .keys import build_archival_key, generate_token
from .migration import DeadLetterArchiveMigrator, MigrationResult
from .writer import DeadLetterArchiveWriter

__all__ = [
    "DeadLetterArchiveWriter",
    "DeadLetterArchiveMigrator",
    "MigrationResult",
    "build_archival_key",
    "generate_token",
]
