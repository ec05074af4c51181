"""
Migration of legacy dead letter archive objects.

Older deployments wrote raw dead letter records directly under the archive
prefix. The migration re-hoists each of them with the current enrichment
pipeline, writes the result under its date partition, and removes the
legacy object once the new one is stored.
"""

import asyncio
from typing import Any

from pydantic import BaseModel, Field

from dead_letter_archive.archive.keys import is_date_partitioned
from dead_letter_archive.archive.writer import DeadLetterArchiveWriter
from dead_letter_archive.observability import metrics
from dead_letter_archive.observability.logger import get_logger, log_operation

logger = get_logger(__name__)


class MigrationResult(BaseModel):
    """
    Outcome of a migration run.

    Attributes:
        migrated: Legacy keys mapped to their new keys
        failed: Legacy keys mapped to the error that stopped them
        skipped: Keys that were already date-partitioned
    """

    migrated: dict[str, str] = Field(default_factory=dict)
    failed: dict[str, str] = Field(default_factory=dict)
    skipped: list[str] = Field(default_factory=list)

    def summary(self) -> dict[str, int]:
        return {
            "migrated": len(self.migrated),
            "failed": len(self.failed),
            "skipped": len(self.skipped),
        }


class DeadLetterArchiveMigrator:
    """
    Moves legacy archive objects into the date-partitioned layout.

    Unlike a live invocation, one bad object does not stop the run: failures
    are logged, counted and reported in the MigrationResult.
    """

    def __init__(self, writer: DeadLetterArchiveWriter, store):
        """
        Initialize migrator.

        Args:
            writer: Archive writer used to re-hoist and write records
            store: Object store supporting list_keys, get_json and delete
        """
        self.writer = writer
        self.store = store
        self.prefix = writer.config.archive_prefix
        self.concurrency = writer.config.migration_concurrency

    async def migrate_object(self, key: str, semaphore: asyncio.Semaphore) -> str:
        """
        Migrate one legacy object.

        Returns:
            The new object key

        Raises:
            Exception: Read, write or delete failures
        """
        async with semaphore:
            record: Any = await self.store.get_json(key)
            new_key = await self.writer.archive_record(record)
            await self.store.delete(key)
            logger.info(
                "Migrated legacy dead letter archive object",
                extra={"legacy_key": key, "archive_key": new_key},
            )
            return new_key

    async def migrate(self, limit: int | None = None) -> MigrationResult:
        """
        Migrate every legacy object under the archive prefix.

        Args:
            limit: Optional maximum number of objects to migrate

        Returns:
            MigrationResult describing each key
        """
        result = MigrationResult()
        with log_operation("Migrating dead letter archive", logger=logger, prefix=self.prefix):
            keys = await self.store.list_keys(f"{self.prefix}/", delimiter="/")

            legacy_keys = []
            for key in keys:
                if is_date_partitioned(key, self.prefix) or not key.endswith(".json"):
                    result.skipped.append(key)
                    metrics.increment_counter(metrics.records_migrated_total, status="skipped")
                else:
                    legacy_keys.append(key)
            if limit is not None:
                legacy_keys = legacy_keys[:limit]

            semaphore = asyncio.Semaphore(self.concurrency)
            outcomes = await asyncio.gather(
                *(self.migrate_object(key, semaphore) for key in legacy_keys),
                return_exceptions=True,
            )

            for key, outcome in zip(legacy_keys, outcomes):
                if isinstance(outcome, BaseException):
                    logger.error(
                        f"Failed to migrate {key}: {outcome}",
                        extra={"legacy_key": key, "error_type": type(outcome).__name__},
                    )
                    result.failed[key] = str(outcome)
                    metrics.increment_counter(metrics.records_migrated_total, status="failed")
                else:
                    result.migrated[key] = outcome
                    metrics.increment_counter(metrics.records_migrated_total, status="migrated")

        logger.info("Dead letter archive migration finished", extra=result.summary())
        return result
