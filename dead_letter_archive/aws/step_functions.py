"""
Rebuild full workflow messages from Step Functions execution status events.

A status change event only embeds the execution's input (and output on
success). For executions that did not succeed, the message the failing step
actually saw is recovered from the execution history, and messages that were
offloaded to S3 (``replace`` pointers) are loaded back in.
"""

import asyncio
import json
from typing import Any

import boto3

from dead_letter_archive.core.enrichment.extractor import WorkflowMessageResolver
from dead_letter_archive.core.exceptions import MessageResolutionError
from dead_letter_archive.core.models import ExecutionStatusEvent
from dead_letter_archive.observability.logger import get_logger

logger = get_logger(__name__)

# Step Functions status -> workflow message meta.status
WORKFLOW_STATUSES = {
    "RUNNING": "running",
    "SUCCEEDED": "completed",
    "FAILED": "failed",
    "ABORTED": "failed",
    "TIMED_OUT": "failed",
}

STEP_FAILED_EVENT_TYPES = ("LambdaFunctionFailed", "ActivityFailed")
FAILED_EVENT_DETAIL_KEYS = {
    "LambdaFunctionFailed": "lambdaFunctionFailedEventDetails",
    "ActivityFailed": "activityFailedEventDetails",
}
UNKNOWN_STEP_NAME = "UnknownFailedStepName"


def _parse_json(value: Any, what: str) -> Any:
    if isinstance(value, (dict, list)):
        return value
    if not isinstance(value, str) or not value:
        raise MessageResolutionError(f"execution event has no {what}")
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise MessageResolutionError(f"execution {what} is not valid JSON: {e}") from e


def _set_path(document: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """Set a ``$.a.b`` style path inside a document; ``$`` replaces it."""
    parts = [p for p in path.lstrip("$").split(".") if p]
    if not parts:
        return value
    target = document
    for part in parts[:-1]:
        child = target.get(part)
        if not isinstance(child, dict):
            child = {}
            target[part] = child
        target = child
    target[parts[-1]] = value
    return document


def _block(message: dict[str, Any], name: str) -> dict[str, Any]:
    """Object-valued block of a message, replacing a missing or non-object one."""
    if not isinstance(message.get(name), dict):
        message[name] = {}
    return message[name]


def get_failed_step_name(events: list[dict[str, Any]], failed_event: dict[str, Any]) -> str:
    """Name of the last task state entered before the failure event."""
    previous = [e for e in events if e.get("id", 0) < failed_event.get("id", 0)]
    entered = [e for e in previous if e.get("type") == "TaskStateEntered"]
    if not entered:
        return UNKNOWN_STEP_NAME
    return entered[-1].get("stateEnteredEventDetails", {}).get("name") or UNKNOWN_STEP_NAME


def get_step_exited_event(
    events: list[dict[str, Any]], failed_event: dict[str, Any]
) -> dict[str, Any] | None:
    """First TaskStateExited event after the failure event, if any."""
    for event in events:
        if event.get("type") == "TaskStateExited" and event.get("id", 0) > failed_event.get("id", 0):
            return event
    return None


class ExecutionMessageResolver(WorkflowMessageResolver):
    """
    Resolve the full workflow message referenced by an execution status event.

    Every failure, whatever its cause, is raised as MessageResolutionError.
    """

    def __init__(self, sfn_client=None, s3_client=None, region: str | None = None):
        """
        Initialize resolver.

        Args:
            sfn_client: boto3 Step Functions client (created lazily when omitted)
            s3_client: boto3 S3 client for offloaded messages (created lazily)
            region: Region for lazily created clients
        """
        self.region = region
        self._sfn_client = sfn_client
        self._s3_client = s3_client

    @property
    def sfn_client(self):
        if self._sfn_client is None:
            self._sfn_client = boto3.client("stepfunctions", **self._client_kwargs())
        return self._sfn_client

    @property
    def s3_client(self):
        if self._s3_client is None:
            self._s3_client = boto3.client("s3", **self._client_kwargs())
        return self._s3_client

    def _client_kwargs(self) -> dict[str, Any]:
        return {"region_name": self.region} if self.region else {}

    async def resolve(self, event: ExecutionStatusEvent) -> dict[str, Any]:
        """
        Return the complete workflow message for an execution event.

        Args:
            event: Classified execution status event

        Returns:
            The workflow message as a dictionary

        Raises:
            MessageResolutionError: If the message cannot be rebuilt
        """
        try:
            return await self._resolve(event)
        except MessageResolutionError as e:
            if e.execution_arn is None:
                e.execution_arn = event.execution_arn
            raise
        except Exception as e:
            raise MessageResolutionError(
                f"could not resolve workflow message: {e}",
                execution_arn=event.execution_arn,
            ) from e

    async def _resolve(self, event: ExecutionStatusEvent) -> dict[str, Any]:
        detail = event.detail
        status = detail.status

        if status == "RUNNING":
            message = _parse_json(detail.input, "input")
        elif status == "SUCCEEDED":
            message = _parse_json(detail.output, "output")
        else:
            # missing input defaults to an empty message; history may still hold the step output
            message = _parse_json(detail.input or "{}", "input")
            if isinstance(message, dict):
                message = await self.get_failed_execution_message(message, detail.execution_arn)

        message = await self.pull_remote_message(message)
        if not isinstance(message, dict):
            raise MessageResolutionError(
                f"workflow message is a {type(message).__name__}, expected an object"
            )

        if status in WORKFLOW_STATUSES:
            _block(message, "meta")["status"] = WORKFLOW_STATUSES[status]
        if detail.stop_date is not None:
            _block(message, "cumulus_meta")["workflow_stop_time"] = detail.stop_date
        return message

    async def get_failed_execution_message(
        self, input_message: dict[str, Any], execution_arn: str | None
    ) -> dict[str, Any]:
        """
        Recover the message the failing step received.

        Falls back to the execution input, with the failure details attached
        as ``exception``, when the history does not contain the step's output.
        History lookup errors are logged and the input message returned.
        """
        amended = dict(input_message)
        if not execution_arn:
            return amended

        try:
            events = await self.get_execution_history(execution_arn)
        except Exception as e:
            logger.error(
                f"Could not read execution history for {execution_arn}: {e}",
                extra={"execution_arn": execution_arn},
            )
            return amended

        failed_events = [e for e in events if e.get("type") in STEP_FAILED_EVENT_TYPES]
        if not failed_events:
            logger.info(
                f"No failed step events found in execution history for {execution_arn}",
                extra={"execution_arn": execution_arn},
            )
            return amended

        failed_event = failed_events[-1]
        step_name = get_failed_step_name(events, failed_event)
        exited_event = get_step_exited_event(events, failed_event)

        if exited_event is None:
            details = failed_event.get(FAILED_EVENT_DETAIL_KEYS[failed_event["type"]], {})
            amended["exception"] = {**details, "failedExecutionStepName": step_name}
            return amended

        try:
            output = _parse_json(
                exited_event.get("stateExitedEventDetails", {}).get("output"), "failed step output"
            )
        except MessageResolutionError as e:
            logger.warning(
                f"Using execution input for {execution_arn}: {e}",
                extra={"execution_arn": execution_arn},
            )
            return amended
        if not isinstance(output, dict):
            return amended
        exception = output.get("exception") if isinstance(output.get("exception"), dict) else {}
        output["exception"] = {**exception, "failedExecutionStepName": step_name}
        return output

    async def get_execution_history(self, execution_arn: str) -> list[dict[str, Any]]:
        """Every history event of an execution, oldest first."""
        def _history() -> list[dict[str, Any]]:
            paginator = self.sfn_client.get_paginator("get_execution_history")
            events = []
            for page in paginator.paginate(executionArn=execution_arn):
                events.extend(page.get("events", []))
            return events

        return await asyncio.to_thread(_history)

    async def pull_remote_message(self, message: Any) -> Any:
        """
        Load a message that was offloaded to S3.

        A message carrying ``replace: {Bucket, Key, TargetPath}`` is completed
        with the stored object, placed at TargetPath (``$`` replaces the whole
        message). Other messages are returned unchanged.
        """
        if not isinstance(message, dict) or not isinstance(message.get("replace"), dict):
            return message

        replace = message["replace"]
        bucket, key = replace.get("Bucket"), replace.get("Key")
        if not bucket or not key:
            raise MessageResolutionError("remote message pointer is missing Bucket or Key")

        response = await asyncio.to_thread(self.s3_client.get_object, Bucket=bucket, Key=key)
        remote = json.loads(response["Body"].read())

        local = {k: v for k, v in message.items() if k != "replace"}
        return _set_path(local, replace.get("TargetPath", "$"), remote)
