"""
Core data models for the dead letter archive.

All models use Pydantic for runtime validation and type safety.
"""

from .archival_record import ArchivalKey, EnrichedArchivalRecord, MessageMetadata
from .envelope import (
    EnvelopeLayer,
    FailureRecordLayer,
    QueueRecordLayer,
    Unrecognized,
    UnwrapResult,
)
from .execution_event import ExecutionDetail, ExecutionStatusEvent
from .workflow_message import WorkflowMessage

__all__ = [
    "QueueRecordLayer",
    "FailureRecordLayer",
    "Unrecognized",
    "EnvelopeLayer",
    "UnwrapResult",
    "ExecutionDetail",
    "ExecutionStatusEvent",
    "WorkflowMessage",
    "MessageMetadata",
    "EnrichedArchivalRecord",
    "ArchivalKey",
]
