"""
Enrichment of dead letter records with execution and workflow metadata.
"""

from .classifier import classify_event, is_execution_status_event
from .extractor import MetadataExtractor, WorkflowMessageResolver
from .hoist import RecordHoister
from .messages import (
    construct_collection_id,
    extract_collection_id,
    extract_granules,
    get_message_provider_id,
    is_message_with_provider,
)

__all__ = [
    "classify_event",
    "is_execution_status_event",
    "MetadataExtractor",
    "WorkflowMessageResolver",
    "RecordHoister",
    "construct_collection_id",
    "extract_collection_id",
    "extract_granules",
    "get_message_provider_id",
    "is_message_with_provider",
]
