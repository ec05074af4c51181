"""
Decode one envelope layer of a dead letter record into a tagged variant.

The layer kinds form a closed set: a plain queue record, a failure
(dead letter) record, or anything else. Callers branch on the variant
instead of probing fields of the raw value.
"""

import json
from typing import Any

from dead_letter_archive.aws.sqs import is_dlq_record_like, is_sqs_record_like
from dead_letter_archive.core.models import (
    EnvelopeLayer,
    FailureRecordLayer,
    QueueRecordLayer,
    Unrecognized,
)


def _error_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    # Structured errors are kept as their JSON text
    return json.dumps(value, default=str)


def decode_layer(value: Any) -> EnvelopeLayer:
    """
    Decode a value into an envelope layer variant.

    Args:
        value: Any decoded JSON value

    Returns:
        FailureRecordLayer if the value is an SQS record with an ``error``
        field, QueueRecordLayer if it is any other SQS record, otherwise
        Unrecognized
    """
    if is_dlq_record_like(value):
        return FailureRecordLayer(record=dict(value), error=_error_text(value.get("error")))
    if is_sqs_record_like(value):
        return QueueRecordLayer(record=dict(value))
    return Unrecognized(value=value)


def is_envelope(layer: EnvelopeLayer) -> bool:
    """True for the queue-record-like variants."""
    return isinstance(layer, (QueueRecordLayer, FailureRecordLayer))
