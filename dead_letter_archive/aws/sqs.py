"""
SQS record recognizers and body parsing.

SQS delivers records to Lambda with a lowercase ``body``; records read with
the SQS API or re-driven by hand use ``Body``. Both shapes are accepted.
"""

import json
from collections.abc import Mapping
from typing import Any


def is_sqs_record_like(value: Any) -> bool:
    """
    Report whether a value looks like an SQS record.

    Args:
        value: Any decoded JSON value

    Returns:
        True if the value is a mapping with a ``body`` or ``Body`` key
    """
    return isinstance(value, Mapping) and ("body" in value or "Body" in value)


def is_dlq_record_like(value: Any) -> bool:
    """
    Report whether a value looks like a dead letter record: an SQS record
    that carries an ``error`` field.
    """
    return is_sqs_record_like(value) and "error" in value


def parse_sqs_message_body(record: Mapping[str, Any]) -> Any:
    """
    Return the payload of an SQS record.

    String bodies are JSON-decoded. A string that is not valid JSON is
    returned unchanged, so callers see a value that is no longer record-like
    instead of an exception.

    Args:
        record: An SQS-record-like mapping

    Returns:
        The decoded body
    """
    if "Body" in record:
        body = record["Body"]
    else:
        body = record.get("body", "{}")

    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")

    if isinstance(body, str):
        try:
            return json.loads(body)
        except json.JSONDecodeError:
            return body

    return body
