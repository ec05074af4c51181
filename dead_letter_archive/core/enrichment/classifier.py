"""
Classification of unwrapped dead letter payloads.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from dead_letter_archive.core.models import ExecutionStatusEvent, Unrecognized
from dead_letter_archive.observability import metrics
from dead_letter_archive.observability.logger import get_logger

logger = get_logger(__name__)


def is_execution_status_event(payload: Any) -> bool:
    """True if the payload is a mapping with a ``detail`` mapping."""
    return isinstance(payload, Mapping) and isinstance(payload.get("detail"), Mapping)


def classify_event(payload: Any) -> ExecutionStatusEvent | None:
    """
    Decode an unwrapped payload as an execution status change event.

    A miss is logged and counted but is not an error: the record is still
    archived, only without execution attributes.

    Args:
        payload: Innermost value of a dead letter record

    Returns:
        The decoded event, or None if the payload has another shape
    """
    if isinstance(payload, Unrecognized):
        reason = payload.reason
    elif not is_execution_status_event(payload):
        reason = f"got {type(payload).__name__} without a detail object"
    else:
        try:
            return ExecutionStatusEvent.model_validate(dict(payload))
        except ValidationError as e:
            reason = f"event failed validation: {e.error_count()} error(s)"

    logger.error(
        "could not parse details from DLQ message body, expected EventBridgeEvent",
        extra={"reason": reason},
    )
    metrics.increment_counter(metrics.enrichment_failures_total, reason="classification_miss")
    return None
