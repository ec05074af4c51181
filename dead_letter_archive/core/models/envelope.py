"""
Envelope layer variants produced by decoding one level of a dead letter record.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


class QueueRecordLayer(BaseModel):
    """
    A queue-record-like layer: a mapping carrying a ``body``/``Body`` payload.

    Attributes:
        record: The layer as received
    """

    kind: Literal["queue_record"] = "queue_record"
    record: dict[str, Any]


class FailureRecordLayer(BaseModel):
    """
    A queue record that also carries an ``error`` field (a DLQ record).

    Attributes:
        record: The layer as received
        error: The layer's error text, None when the field is null or empty
    """

    kind: Literal["failure_record"] = "failure_record"
    record: dict[str, Any]
    error: str | None = None


class Unrecognized(BaseModel):
    """
    A value that is not an envelope layer.

    Attributes:
        value: The value as received
        reason: Why the value was not recognized
    """

    kind: Literal["unrecognized"] = "unrecognized"
    value: Any = None
    reason: str = "not queue-record-like"


EnvelopeLayer = Annotated[
    Union[QueueRecordLayer, FailureRecordLayer, Unrecognized],
    Field(discriminator="kind"),
]


class UnwrapResult(BaseModel):
    """
    Outcome of peeling every envelope layer off a dead letter record.

    Attributes:
        payload: Innermost value (an Unrecognized variant if the depth cap was hit)
        error: Error text of the outermost layer that carried one
        depth: Number of layers peeled
        depth_exceeded: True when unwrapping stopped at the depth cap
    """

    payload: Any = None
    error: str | None = None
    depth: int = Field(0, ge=0)
    depth_exceeded: bool = False
