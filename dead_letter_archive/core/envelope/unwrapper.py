"""
Envelope unwrapping for dead letter records.

A record that fails repeatedly can be wrapped by several queues in turn:
a DLQ record whose body is an SQS record whose body is the original
execution event. Layers are peeled from the outside in.
"""

from typing import Any, Callable

from dead_letter_archive.aws.sqs import parse_sqs_message_body
from dead_letter_archive.core.envelope.decoder import decode_layer, is_envelope
from dead_letter_archive.core.models import FailureRecordLayer, Unrecognized, UnwrapResult
from dead_letter_archive.observability import metrics
from dead_letter_archive.observability.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_DEPTH = 100


def unwrap_dead_letter(
    value: Any,
    max_depth: int = DEFAULT_MAX_DEPTH,
    body_parser: Callable[[dict[str, Any]], Any] = parse_sqs_message_body,
) -> UnwrapResult:
    """
    Peel queue-record layers off a value until the innermost payload is reached.

    The error of the outermost failure layer with a non-null error is kept;
    errors of inner layers are ignored once one has been captured.

    Args:
        value: The dead letter record, or any value
        max_depth: Maximum number of layers to peel
        body_parser: Returns the inner value of a queue-record layer

    Returns:
        UnwrapResult with the payload and the captured error. When the depth
        cap is reached the payload is an Unrecognized variant and
        depth_exceeded is set.
    """
    error: str | None = None
    depth = 0
    current = value

    layer = decode_layer(current)
    while is_envelope(layer):
        if depth >= max_depth:
            logger.warning(
                f"Dead letter envelope nested deeper than {max_depth} layers, "
                "treating payload as unrecognized",
                extra={"depth": depth, "captured_error": error},
            )
            metrics.increment_counter(metrics.enrichment_failures_total, reason="depth_exceeded")
            return UnwrapResult(
                payload=Unrecognized(value=None, reason=f"nested deeper than {max_depth} layers"),
                error=error,
                depth=depth,
                depth_exceeded=True,
            )

        if isinstance(layer, FailureRecordLayer) and error is None:
            error = layer.error

        current = body_parser(layer.record)
        depth += 1
        layer = decode_layer(current)

    return UnwrapResult(payload=current, error=error, depth=depth)
