"""
Lambda entry point: archive dead letter records delivered by SQS.

The function is subscribed to the dead letter queue. It returns nothing on
success; any exception fails the invocation so SQS redelivers the batch.
"""

import asyncio
from typing import Any

from dead_letter_archive.archive.writer import DeadLetterArchiveWriter
from dead_letter_archive.aws.s3 import S3ObjectStore
from dead_letter_archive.aws.step_functions import ExecutionMessageResolver
from dead_letter_archive.config.settings import ArchiveConfig
from dead_letter_archive.observability.logger import get_logger

logger = get_logger(__name__)


def build_writer(config: ArchiveConfig, s3_client=None, sfn_client=None) -> DeadLetterArchiveWriter:
    """
    Wire an archive writer to its AWS collaborators.

    Args:
        config: Validated archive configuration
        s3_client: Optional boto3 S3 client shared by the store and resolver
        sfn_client: Optional boto3 Step Functions client
    """
    store = S3ObjectStore(config.system_bucket, client=s3_client, region=config.aws_region)
    resolver = ExecutionMessageResolver(
        sfn_client=sfn_client, s3_client=s3_client, region=config.aws_region
    )
    return DeadLetterArchiveWriter(config, store, resolver)


async def archive_event(event: dict[str, Any], config: ArchiveConfig, writer=None) -> list[str]:
    """
    Archive the records of an SQS event.

    Args:
        event: Lambda event, ``{"Records": [...]}``
        config: Validated archive configuration
        writer: Writer to use instead of one built from config

    Returns:
        Written object keys
    """
    records = (event.get("Records") or []) if isinstance(event, dict) else []
    writer = writer or build_writer(config)
    return await writer.run(list(records))


def handler(event: dict[str, Any], context: Any = None) -> None:
    """
    Lambda handler for saving DLQ records to the dead letter archive in S3.

    Raises:
        ConfigurationError: If system_bucket or stackName is not set
        ArchiveWriteError: If any record could not be written
    """
    config = ArchiveConfig.from_env()
    keys = asyncio.run(archive_event(event, config))
    logger.info(f"Archived {len(keys)} dead letter records", extra={"record_count": len(keys)})
