"""
In-memory collaborators and record builders shared by the test suite.
"""
import json
from typing import Any

from dead_letter_archive.core.enrichment.extractor import WorkflowMessageResolver
from dead_letter_archive.core.exceptions import MessageResolutionError

EXECUTION_ARN = "arn:aws:states:us-east-1:123456789012:execution:IngestGranule:abc"
STATE_MACHINE_ARN = "arn:aws:states:us-east-1:123456789012:stateMachine:IngestGranule"


class InMemoryObjectStore:
    """Object store that keeps documents in a dict and can fail chosen writes."""

    def __init__(self, fail_when=None):
        self.objects: dict[str, Any] = {}
        self.deleted: list[str] = []
        self.fail_when = fail_when

    async def put_json(self, key: str, document: Any) -> None:
        if self.fail_when is not None and self.fail_when(key, document):
            raise IOError(f"simulated write failure for {key}")
        # Round-trip through JSON like a real store would
        self.objects[key] = json.loads(json.dumps(document))

    async def get_json(self, key: str) -> Any:
        return self.objects[key]

    async def delete(self, key: str) -> None:
        self.deleted.append(key)
        self.objects.pop(key, None)

    async def list_keys(self, prefix: str, delimiter: str | None = None) -> list[str]:
        keys = [k for k in self.objects if k.startswith(prefix)]
        if delimiter:
            keys = [k for k in keys if delimiter not in k[len(prefix):]]
        return sorted(keys)


class StubResolver(WorkflowMessageResolver):
    """Resolver returning canned messages keyed by execution ARN."""

    def __init__(self, messages: dict[str, Any] | None = None, failing: set[str] | None = None):
        self.messages = messages or {}
        self.failing = failing or set()
        self.calls: list[str | None] = []

    async def resolve(self, event):
        self.calls.append(event.execution_arn)
        if event.execution_arn in self.failing:
            raise MessageResolutionError("execution history is gone", event.execution_arn)
        if event.execution_arn not in self.messages:
            raise MessageResolutionError("no message for execution", event.execution_arn)
        return json.loads(json.dumps(self.messages[event.execution_arn]))


def make_execution_event(
    execution_arn: str | None = EXECUTION_ARN,
    status: str | None = "FAILED",
    time: str | None = "2024-03-21T15:48:08Z",
    state_machine_arn: str | None = STATE_MACHINE_ARN,
    message: dict[str, Any] | None = None,
) -> dict[str, Any]:
    detail = {
        "executionArn": execution_arn,
        "stateMachineArn": state_machine_arn,
        "status": status,
        "input": json.dumps(message or {}),
    }
    event = {
        "source": "aws.states",
        "detail-type": "Step Functions Execution Status Change",
        "detail": {k: v for k, v in detail.items() if v is not None},
    }
    if time is not None:
        event["time"] = time
    return event


def make_workflow_message(
    collection: tuple[str, str] | None = ("MOD09", "006"),
    granule_ids: list[str | None] | None = None,
    provider_id: str | None = "PODAAC",
) -> dict[str, Any]:
    meta: dict[str, Any] = {}
    if collection:
        meta["collection"] = {"name": collection[0], "version": collection[1]}
    if provider_id:
        meta["provider"] = {"id": provider_id, "protocol": "s3"}
    payload: dict[str, Any] = {}
    if granule_ids is not None:
        payload["granules"] = [
            {"granuleId": gid} if gid is not None else {} for gid in granule_ids
        ]
    return {"cumulus_meta": {"execution_name": "abc"}, "meta": meta, "payload": payload}


def wrap_sqs(body: Any, error: Any = None, with_error_field: bool = False, **extra) -> dict[str, Any]:
    """Wrap a value in one SQS record layer, as a DLQ record when an error is given."""
    record = {
        "messageId": "6b1c5e8a-0000-4000-8000-000000000000",
        "body": body if isinstance(body, str) else json.dumps(body),
        "attributes": {"ApproximateReceiveCount": "3"},
        "eventSource": "aws:sqs",
        **extra,
    }
    if error is not None or with_error_field:
        record["error"] = error
    return record


def counter_value(counter, **labels) -> float:
    """Current value of one labelled series of a Prometheus counter (0.0 if unseen)."""
    for metric in counter.collect():
        for sample in metric.samples:
            if sample.name == f"{metric.name}_total" and sample.labels == labels:
                return sample.value
    return 0.0
