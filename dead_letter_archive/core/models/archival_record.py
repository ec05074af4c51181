"""
EnrichedArchivalRecord and ArchivalKey models for the dead letter archive.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UNKNOWN_EXECUTION = "unknown"


class MessageMetadata(BaseModel):
    """
    Identifiers pulled from a resolved workflow message.

    Attributes:
        collection_id: ``name___version`` of the message's collection
        granules: Granule ids from the payload; None when the payload has no
            granule list at all, [] when it has an empty one
        provider_id: Id of the message's provider
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    collection_id: str | None = None
    granules: list[str | None] | None = None
    provider_id: str | None = None


class EnrichedArchivalRecord(BaseModel):
    """
    A dead letter record together with the attributes hoisted out of it.

    Every enrichment field is always serialized, as null when it could not be
    resolved, so downstream queries can rely on field presence.

    Attributes:
        original: The dead letter record exactly as received
        error: Error text of the outermost failure envelope
        time: Timestamp of the execution status change event
        status: Execution status
        provider_id: Provider id from the workflow message
        collection_id: Collection id from the workflow message
        granules: Granule ids from the workflow message payload
        execution_arn: ARN of the failed execution
        state_machine_arn: ARN of the execution's state machine
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "original": {"messageId": "6b1c...", "body": "{...}", "error": "Lambda timed out"},
                "error": "Lambda timed out",
                "time": "2024-03-21T15:48:08Z",
                "status": "FAILED",
                "providerId": "PODAAC",
                "collectionId": "MOD09___006",
                "granules": ["MOD09GQ.A2017025.h21v00.006.2017034065104"],
                "executionArn": "arn:aws:states:us-east-1:123456789012:execution:IngestGranule:abc",
                "stateMachineArn": "arn:aws:states:us-east-1:123456789012:stateMachine:IngestGranule",
            }
        },
    )

    original: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None
    time: str | None = None
    status: str | None = None
    provider_id: str | None = None
    collection_id: str | None = None
    granules: list[str | None] | None = None
    execution_arn: str | None = None
    state_machine_arn: str | None = None

    def to_document(self) -> dict[str, Any]:
        """
        Flatten into the persisted document: original fields first, then the
        enrichment fields, which win over original fields of the same name.
        """
        enrichment = self.model_dump(by_alias=True, exclude={"original"})
        return {**self.original, **enrichment}


class ArchivalKey(BaseModel):
    """
    Object key of one archived dead letter record.

    Layout: ``<prefix>/<YYYY-MM-DD>/<execution-or-unknown>-<token>.json``

    Attributes:
        prefix: Archive prefix, ``<stack>/dead-letter-archive/sqs``
        archive_date: UTC calendar date the record is filed under
        execution_name: Execution ARN, or "unknown"
        token: Random uniqueness token
    """

    prefix: str = Field(..., min_length=1)
    archive_date: date
    execution_name: str = UNKNOWN_EXECUTION
    token: str = Field(..., min_length=1)

    @property
    def key(self) -> str:
        return (
            f"{self.prefix}/{self.archive_date.isoformat()}/"
            f"{self.execution_name}-{self.token}.json"
        )

    def __str__(self) -> str:
        return self.key
