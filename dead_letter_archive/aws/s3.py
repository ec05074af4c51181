"""
S3 object store for the dead letter archive.

boto3 clients are synchronous and thread safe, so each call is dispatched
to the default executor with asyncio.to_thread and awaited per record.
"""

import asyncio
import json
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from dead_letter_archive.observability.logger import get_logger

logger = get_logger(__name__)


def create_s3_client(region: str | None = None):
    """Create a boto3 S3 client, using the default credential chain."""
    if region:
        return boto3.client("s3", region_name=region)
    return boto3.client("s3")


class S3ObjectStore:
    """
    JSON document store backed by one S3 bucket.

    Errors from boto3 are logged and re-raised unchanged; retry policy is
    left to the caller (and ultimately to the queue's redrive policy).
    """

    def __init__(self, bucket: str, client=None, region: str | None = None):
        """
        Initialize the store.

        Args:
            bucket: Bucket name
            client: boto3 S3 client (created lazily when omitted)
            region: Region for the lazily created client
        """
        self.bucket = bucket
        self.region = region
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = create_s3_client(self.region)
        return self._client

    async def put_json(self, key: str, document: Any) -> None:
        """
        Serialize a document as JSON and write it.

        Args:
            key: Object key
            document: JSON-serializable document

        Raises:
            ClientError: If S3 rejects the write
            BotoCoreError: On transport failures
        """
        body = json.dumps(document, default=str)
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=body.encode("utf-8"),
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                f"Failed to write s3://{self.bucket}/{key}: {e}",
                extra={"bucket": self.bucket, "archive_key": key},
            )
            raise

    async def get_json(self, key: str) -> Any:
        """
        Read and decode a JSON object.

        Raises:
            ClientError: If the object cannot be read
            json.JSONDecodeError: If the object is not JSON
        """
        response = await asyncio.to_thread(
            self.client.get_object, Bucket=self.bucket, Key=key
        )
        return json.loads(response["Body"].read())

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)

    async def list_keys(self, prefix: str, delimiter: str | None = None) -> list[str]:
        """
        List every key under a prefix.

        Args:
            prefix: Key prefix
            delimiter: When set, only keys directly under the prefix are returned

        Returns:
            Object keys in listing order
        """
        def _list() -> list[str]:
            paginator = self.client.get_paginator("list_objects_v2")
            params = {"Bucket": self.bucket, "Prefix": prefix}
            if delimiter:
                params["Delimiter"] = delimiter
            keys = []
            for page in paginator.paginate(**params):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
            return keys

        return await asyncio.to_thread(_list)
