"""
WorkflowMessage model representing a full workflow execution message (ephemeral).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WorkflowMessage(BaseModel):
    """
    The complete message a workflow execution was started with.

    Only the blocks the archive reads are declared; everything else the
    message carries is kept as extra fields. Every block is optional because
    messages rebuilt from failed executions are frequently partial.

    Attributes:
        cumulus_meta: Execution bookkeeping (execution name, workflow times)
        meta: Workflow metadata: collection, provider, status
        payload: Task payload, may contain a ``granules`` list
        exception: Failure details attached to failed executions
    """

    model_config = ConfigDict(extra="allow")

    cumulus_meta: dict[str, Any] = Field(default_factory=dict)
    meta: dict[str, Any] = Field(default_factory=dict)
    payload: Any = None
    exception: Any = None

    @field_validator("cumulus_meta", "meta", mode="before")
    @classmethod
    def blank_non_mapping_block(cls, v: Any) -> Any:
        """A null or non-object block reads as empty so other blocks stay usable."""
        return v if isinstance(v, dict) else {}

    @property
    def collection(self) -> dict[str, Any]:
        collection = self.meta.get("collection")
        return collection if isinstance(collection, dict) else {}

    @property
    def provider(self) -> dict[str, Any] | None:
        provider = self.meta.get("provider")
        return provider if isinstance(provider, dict) else None
