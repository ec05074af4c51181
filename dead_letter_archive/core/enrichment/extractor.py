"""
Metadata extraction from the workflow message behind an execution event.
"""

from abc import ABC, abstractmethod
from typing import Any

from dead_letter_archive.core.enrichment.messages import (
    extract_collection_id,
    extract_granules,
    get_message_provider_id,
    is_message_with_provider,
)
from dead_letter_archive.core.models import ExecutionStatusEvent, MessageMetadata, WorkflowMessage
from dead_letter_archive.observability import metrics
from dead_letter_archive.observability.logger import get_logger

logger = get_logger(__name__)


class WorkflowMessageResolver(ABC):
    """
    Abstract source of full workflow messages.

    Implementations look up the message an execution event refers to and
    raise MessageResolutionError (or any other exception) when they cannot.
    """

    @abstractmethod
    async def resolve(self, event: ExecutionStatusEvent) -> dict[str, Any]:
        """
        Return the full workflow message for an execution event.

        Args:
            event: Classified execution status event

        Raises:
            MessageResolutionError: If the message cannot be rebuilt
        """
        pass


class MetadataExtractor:
    """
    Pulls collection, granule and provider identifiers for an execution event.

    Resolution failures never propagate: they are logged and the metadata
    comes back all-null so the record can still be archived.
    """

    def __init__(self, resolver: WorkflowMessageResolver):
        """
        Initialize metadata extractor.

        Args:
            resolver: Source of full workflow messages
        """
        self.resolver = resolver

    async def resolve_message(self, event: ExecutionStatusEvent) -> WorkflowMessage | None:
        """Resolved workflow message, or None when it cannot be obtained."""
        try:
            resolved = await self.resolver.resolve(event)
            return WorkflowMessage.model_validate(resolved)
        except Exception as e:
            logger.error(
                f"could not parse details from DLQ message body due to {e}",
                extra={"execution_arn": event.execution_arn, "error_type": type(e).__name__},
            )
            metrics.increment_counter(metrics.enrichment_failures_total, reason="resolution_failure")
            return None

    async def extract(self, event: ExecutionStatusEvent) -> MessageMetadata:
        """
        Extract message metadata for an execution event.

        Args:
            event: Classified execution status event

        Returns:
            MessageMetadata, with every field None if resolution failed
        """
        message = await self.resolve_message(event)
        if message is None:
            return MessageMetadata()

        provider_id = None
        if is_message_with_provider(message):
            provider_id = get_message_provider_id(message)

        return MessageMetadata(
            collection_id=extract_collection_id(message),
            granules=extract_granules(message),
            provider_id=provider_id,
        )
