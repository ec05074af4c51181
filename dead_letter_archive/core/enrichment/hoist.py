"""
Hoist identifying attributes of a dead letter record to its top level.

Flow: unwrap envelope -> classify event -> extract message metadata
"""

from collections.abc import Mapping
from typing import Any

from dead_letter_archive.core.envelope import DEFAULT_MAX_DEPTH, unwrap_dead_letter
from dead_letter_archive.core.enrichment.classifier import classify_event
from dead_letter_archive.core.enrichment.extractor import MetadataExtractor
from dead_letter_archive.core.models import EnrichedArchivalRecord
from dead_letter_archive.observability.logger import get_logger

logger = get_logger(__name__)


class RecordHoister:
    """
    Builds the enriched archival record for one dead letter record.

    Every step degrades to null fields instead of failing, so a record is
    never dropped for lack of parseable metadata.
    """

    def __init__(self, extractor: MetadataExtractor, max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize record hoister.

        Args:
            extractor: Metadata extractor for classified events
            max_depth: Maximum envelope layers peeled per record
        """
        self.extractor = extractor
        self.max_depth = max_depth

    async def hoist(self, record: Mapping[str, Any]) -> EnrichedArchivalRecord:
        """
        Reformat a dead letter record with key attributes at the top level.

        Args:
            record: SQS-record-like dead letter record

        Returns:
            EnrichedArchivalRecord whose enrichment fields are None wherever
            the value could not be resolved
        """
        unwrapped = unwrap_dead_letter(record, max_depth=self.max_depth)
        enriched = EnrichedArchivalRecord(original=dict(record), error=unwrapped.error)

        event = classify_event(unwrapped.payload)
        if event is None:
            return enriched

        enriched.execution_arn = event.execution_arn
        enriched.state_machine_arn = event.state_machine_arn
        enriched.status = event.status
        enriched.time = event.time

        metadata = await self.extractor.extract(event)
        enriched.collection_id = metadata.collection_id
        enriched.granules = metadata.granules
        enriched.provider_id = metadata.provider_id

        logger.debug(
            "Hoisted dead letter record details",
            extra={
                "execution_arn": enriched.execution_arn,
                "collection_id": enriched.collection_id,
                "depth": unwrapped.depth,
            },
        )
        return enriched
