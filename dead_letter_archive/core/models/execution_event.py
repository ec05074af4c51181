"""
ExecutionStatusEvent model for Step Functions "Execution Status Change" events.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _blank_to_none(v: Any) -> Any:
    if v is None or v == "":
        return None
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class ExecutionDetail(BaseModel):
    """
    The ``detail`` block of an execution status change event.

    Attributes:
        execution_arn: ARN of the workflow execution
        state_machine_arn: ARN of the workflow's state machine
        status: Execution status (RUNNING, SUCCEEDED, FAILED, ...)
        name: Execution name
        input: Execution input, a JSON string
        output: Execution output, a JSON string (only on success)
        start_date: Epoch milliseconds when the execution started
        stop_date: Epoch milliseconds when the execution stopped
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    execution_arn: str | None = None
    state_machine_arn: str | None = None
    status: str | None = None
    name: str | None = None
    input: Any = None
    output: Any = None
    start_date: Any = None
    stop_date: Any = None

    @field_validator("execution_arn", "state_machine_arn", "status", "name", mode="before")
    @classmethod
    def normalize_identifier(cls, v):
        """Empty identifiers are treated as missing."""
        return _blank_to_none(v)


class ExecutionStatusEvent(BaseModel):
    """
    EventBridge event describing a workflow execution status change.

    Note: ExecutionStatusEvent is ephemeral, built while enriching a single
    dead letter record and never persisted.

    Attributes:
        detail: Execution identifiers and input/output
        time: Event timestamp (ISO 8601, UTC)
        source: Event source, usually ``aws.states``
        detail_type: Event detail type
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        json_schema_extra={
            "example": {
                "source": "aws.states",
                "detail-type": "Step Functions Execution Status Change",
                "time": "2024-03-21T15:48:08Z",
                "detail": {
                    "executionArn": "arn:aws:states:us-east-1:123456789012:execution:IngestGranule:abc",
                    "stateMachineArn": "arn:aws:states:us-east-1:123456789012:stateMachine:IngestGranule",
                    "status": "FAILED",
                    "input": "{\"meta\": {}, \"payload\": {}}",
                }
            }
        },
    )

    detail: ExecutionDetail
    time: str | None = None
    source: str | None = None
    detail_type: str | None = Field(None, alias="detail-type")

    @field_validator("time", mode="before")
    @classmethod
    def normalize_time(cls, v):
        return _blank_to_none(v)

    @property
    def execution_arn(self) -> str | None:
        return self.detail.execution_arn

    @property
    def state_machine_arn(self) -> str | None:
        return self.detail.state_machine_arn

    @property
    def status(self) -> str | None:
        return self.detail.status
