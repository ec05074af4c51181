"""
Helpers for reading identifiers out of workflow messages.
"""

from collections.abc import Mapping
from typing import Any

from dead_letter_archive.core.models import WorkflowMessage

COLLECTION_ID_SEPARATOR = "___"


def construct_collection_id(name: str, version: str) -> str:
    """
    Build the canonical collection id used across the system.

    >>> construct_collection_id("MOD09", "006")
    'MOD09___006'
    """
    return f"{name}{COLLECTION_ID_SEPARATOR}{version}"


def _non_empty(value: Any) -> Any:
    return value if value not in (None, "") else None


def extract_collection_id(message: WorkflowMessage) -> str | None:
    """Collection id when the message names both collection name and version."""
    name = _non_empty(message.collection.get("name"))
    version = _non_empty(message.collection.get("version"))
    if name and version:
        return construct_collection_id(str(name), str(version))
    return None


def payload_has_granules(payload: Any) -> bool:
    return isinstance(payload, Mapping) and isinstance(payload.get("granules"), list)


def extract_granules(message: WorkflowMessage) -> list[str | None] | None:
    """
    Granule ids listed in the message payload.

    Returns:
        One id (or None) per granule entry, or None when the payload has
        no granule list at all
    """
    if not payload_has_granules(message.payload):
        return None
    granule_ids = []
    for granule in message.payload["granules"]:
        granule_id = granule.get("granuleId") if isinstance(granule, Mapping) else None
        granule_ids.append(str(granule_id) if _non_empty(granule_id) else None)
    return granule_ids


def is_message_with_provider(message: WorkflowMessage) -> bool:
    return message.provider is not None


def get_message_provider_id(message: WorkflowMessage) -> str | None:
    provider_id = _non_empty(message.provider.get("id")) if message.provider else None
    return str(provider_id) if provider_id is not None else None
