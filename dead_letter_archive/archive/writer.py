"""
Dead letter archive writer.

Archives a batch of dead letter records: every record is enriched and
written concurrently, and the batch only succeeds if every write did.
"""

import asyncio
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable, Protocol

from dead_letter_archive.archive.keys import build_archival_key, generate_token, utc_now
from dead_letter_archive.aws.sqs import is_sqs_record_like
from dead_letter_archive.config.settings import ArchiveConfig
from dead_letter_archive.core.enrichment import MetadataExtractor, RecordHoister
from dead_letter_archive.core.enrichment.extractor import WorkflowMessageResolver
from dead_letter_archive.core.exceptions import ArchiveWriteError, InvocationTimeoutError
from dead_letter_archive.observability import metrics
from dead_letter_archive.observability.logger import get_logger, log_operation

logger = get_logger(__name__)


class ObjectStore(Protocol):
    """Durable document store the archive writes to."""

    async def put_json(self, key: str, document: Any) -> None:
        ...


class DeadLetterArchiveWriter:
    """
    Writes dead letter records to the archive, one object per record.

    Records are independent: there is no ordering between them and each gets
    a key of its own. Write failures are collected after every record has
    settled and then raised together as ArchiveWriteError.
    """

    def __init__(
        self,
        config: ArchiveConfig,
        store: ObjectStore,
        resolver: WorkflowMessageResolver,
        token_factory: Callable[[], str] = generate_token,
        now: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize archive writer.

        Args:
            config: Validated archive configuration
            store: Object store receiving the archive documents
            resolver: Source of full workflow messages
            token_factory: Source of key uniqueness tokens
            now: Clock used for records without a resolved time
        """
        self.config = config
        self.store = store
        self.hoister = RecordHoister(MetadataExtractor(resolver), max_depth=config.max_unwrap_depth)
        self.token_factory = token_factory
        self.now = now

    async def prepare_record(self, record: Any) -> tuple[Any, str | None, Any]:
        """
        Build the document to archive for one record.

        Returns:
            (document, execution_arn, time) where document is the enriched
            record for SQS-record-like input and the record unchanged otherwise
        """
        if is_sqs_record_like(record):
            enriched = await self.hoister.hoist(record)
            return enriched.to_document(), enriched.execution_arn, enriched.time

        logger.warning(
            "Dead letter record is not SQS-record-like, archiving it unmodified",
            extra={"record_type": type(record).__name__},
        )
        time_value = record.get("time") if isinstance(record, Mapping) else None
        return record, None, time_value

    async def archive_record(self, record: Any) -> str:
        """
        Enrich and write one dead letter record.

        Args:
            record: Raw dead letter record

        Returns:
            The object key the record was written to

        Raises:
            Exception: Whatever the object store raised
        """
        document, execution_arn, time_value = await self.prepare_record(record)
        key = str(build_archival_key(
            self.config.archive_prefix,
            time_value=time_value,
            execution_arn=execution_arn,
            token_factory=self.token_factory,
            now=self.now,
        ))

        try:
            with metrics.track_duration(metrics.archive_write_duration_seconds):
                await self.store.put_json(key, document)
        except Exception:
            metrics.increment_counter(metrics.archive_writes_total, status="failure")
            raise

        metrics.increment_counter(metrics.archive_writes_total, status="success")
        metrics.increment_counter(
            metrics.records_archived_total,
            kind="enriched" if is_sqs_record_like(record) else "opaque",
        )
        logger.info(
            "Archived dead letter record",
            extra={"archive_key": key, "execution_arn": execution_arn},
        )
        return key

    async def archive_batch(self, records: list[Any]) -> list[str]:
        """
        Archive every record of a batch concurrently.

        All records are launched at once and awaited until each has settled,
        so no write is abandoned when another fails.

        Args:
            records: Raw dead letter records

        Returns:
            Written object keys, in input order

        Raises:
            ArchiveWriteError: If any record failed to archive; chained to the
                first failure in input order
        """
        metrics.observe_histogram(metrics.batch_size, len(records))
        results = await asyncio.gather(
            *(self.archive_record(record) for record in records),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        keys = [r for r in results if not isinstance(r, BaseException)]
        if failures:
            for failure in failures:
                logger.error(
                    f"Failed to archive dead letter record: {failure}",
                    extra={"error_type": type(failure).__name__},
                )
            raise ArchiveWriteError(len(failures), len(records), keys) from failures[0]
        return keys

    async def run(self, records: list[Any]) -> list[str]:
        """
        Archive a batch under the invocation deadline.

        Raises:
            ArchiveWriteError: If any record failed to archive
            InvocationTimeoutError: If the batch did not settle in time
        """
        timeout = self.config.invocation_timeout_seconds
        with log_operation("Archiving dead letter batch", logger=logger, batch_size=len(records)):
            try:
                return await asyncio.wait_for(self.archive_batch(records), timeout=timeout)
            except asyncio.TimeoutError as e:
                raise InvocationTimeoutError(
                    f"Dead letter batch of {len(records)} records did not settle within {timeout}s"
                ) from e
