"""
Archive configuration.

Destination identifiers are collected once per invocation into an
ArchiveConfig and validated before any record is touched.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from dead_letter_archive.core.exceptions import ConfigurationError

DEFAULT_ARCHIVE_SUBPATH = "dead-letter-archive/sqs"


class ArchiveConfig(BaseModel):
    """
    Destination and tuning settings for one archive invocation.

    Attributes:
        system_bucket: S3 bucket that holds the dead letter archive
        stack_name: Deployment stack name, first segment of every archive key
        archive_subpath: Path under the stack name where records are written
        max_unwrap_depth: Maximum number of envelope layers peeled per record
        invocation_timeout_seconds: Deadline for one whole batch
        migration_concurrency: Parallel object migrations
        aws_region: Region for boto3 clients (None uses the default chain)
    """

    system_bucket: str = Field(..., min_length=1)
    stack_name: str = Field(..., min_length=1)
    archive_subpath: str = DEFAULT_ARCHIVE_SUBPATH
    max_unwrap_depth: int = Field(100, ge=1)
    invocation_timeout_seconds: float = Field(840.0, gt=0)
    migration_concurrency: int = Field(10, ge=1)
    aws_region: str | None = None

    @field_validator("archive_subpath")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        """Keys are joined with '/', so surrounding slashes are dropped."""
        v = v.strip("/")
        if not v:
            raise ValueError("archive_subpath cannot be empty")
        return v

    @property
    def archive_prefix(self) -> str:
        """Key prefix under which all archive objects are written."""
        return f"{self.stack_name}/{self.archive_subpath}"

    @classmethod
    def build(cls, **values: Any) -> "ArchiveConfig":
        """
        Build a config, converting pydantic failures to ConfigurationError.

        Raises:
            ConfigurationError: If a required value is missing or invalid
        """
        if not values.get("system_bucket"):
            raise ConfigurationError("System bucket env var is required.")
        if not values.get("stack_name"):
            raise ConfigurationError(
                "Could not determine archive path as stackName env var is undefined."
            )
        cleaned = {k: v for k, v in values.items() if v is not None}
        try:
            return cls(**cleaned)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid archive configuration: {e}") from e

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "ArchiveConfig":
        """
        Load configuration from environment variables.

        Recognized variables: system_bucket, stackName, DLA_ARCHIVE_SUBPATH,
        DLA_MAX_UNWRAP_DEPTH, DLA_INVOCATION_TIMEOUT, DLA_MIGRATION_CONCURRENCY,
        AWS_REGION.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            Validated ArchiveConfig

        Raises:
            ConfigurationError: If the bucket or stack name is missing
        """
        env = os.environ if environ is None else environ
        return cls.build(
            system_bucket=env.get("system_bucket"),
            stack_name=env.get("stackName"),
            archive_subpath=env.get("DLA_ARCHIVE_SUBPATH"),
            max_unwrap_depth=env.get("DLA_MAX_UNWRAP_DEPTH"),
            invocation_timeout_seconds=env.get("DLA_INVOCATION_TIMEOUT"),
            migration_concurrency=env.get("DLA_MIGRATION_CONCURRENCY"),
            aws_region=env.get("AWS_REGION"),
        )

    @classmethod
    def from_yaml(cls, config_path: str | Path, **overrides: Any) -> "ArchiveConfig":
        """
        Load configuration from the ``archive`` section of a YAML file.

        Expected YAML format:
        ```yaml
        archive:
          system_bucket: my-internal-bucket
          stack_name: my-stack
          max_unwrap_depth: 50
        ```

        Args:
            config_path: Path to the YAML file
            **overrides: Values that take precedence over the file (None is ignored)

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigurationError: If the file lacks an archive section or values
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Archive configuration file not found: {config_path}")

        with open(config_path) as f:
            document = yaml.safe_load(f) or {}

        section = document.get("archive")
        if not isinstance(section, dict):
            raise ConfigurationError("Configuration file must contain an 'archive' section")

        values = dict(section)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.build(**values)
