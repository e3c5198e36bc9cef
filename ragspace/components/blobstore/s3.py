"""S3-compatible blob store (AWS S3, MinIO, TOS, R2).

boto3 is synchronous; every call is pushed to a worker thread so the event
loop is never blocked. Errors surface as UpstreamStoreError("blob", ...).
"""

import asyncio
import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ragspace.components.workspace.errors import UpstreamStoreError

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


def create_s3_client(
    access_key: str,
    secret_key: str,
    region: str = "us-east-1",
    endpoint_url: str | None = None,
    force_path_style: bool = False,
):
    """Create a boto3 S3 client."""
    config = Config(
        signature_version="s3v4",
        s3={"addressing_style": "path" if force_path_style else "virtual"},
    )
    return boto3.client(
        "s3",
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        endpoint_url=endpoint_url,
        region_name=region,
        config=config,
    )


def _is_missing(error: ClientError) -> bool:
    return str(error.response.get("Error", {}).get("Code", "")) in _MISSING_CODES


class S3BlobStore:
    def __init__(self, client, bucket: str):
        if not bucket:
            raise ValueError("S3 bucket name is required")
        self._client = client
        self._bucket = bucket

    @property
    def bucket(self) -> str:
        return self._bucket

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> int:
        params = {"Bucket": self._bucket, "Key": key, "Body": data}
        if content_type:
            params["ContentType"] = content_type
        try:
            await asyncio.to_thread(self._client.put_object, **params)
        except (ClientError, BotoCoreError) as e:
            raise UpstreamStoreError("blob", f"Failed to upload s3://{self._bucket}/{key}: {e}") from e
        logger.debug(f"Uploaded s3://{self._bucket}/{key} ({len(data)} bytes)")
        return len(data)

    async def get(self, key: str) -> bytes | None:
        try:
            response = await asyncio.to_thread(self._client.get_object, Bucket=self._bucket, Key=key)
            return await asyncio.to_thread(response["Body"].read)
        except ClientError as e:
            if _is_missing(e):
                return None
            raise UpstreamStoreError("blob", f"Failed to download s3://{self._bucket}/{key}: {e}") from e
        except BotoCoreError as e:
            raise UpstreamStoreError("blob", f"Failed to download s3://{self._bucket}/{key}: {e}") from e

    async def delete(self, key: str) -> None:
        # DeleteObject succeeds for missing keys
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise UpstreamStoreError("blob", f"Failed to delete s3://{self._bucket}/{key}: {e}") from e
        logger.debug(f"Deleted s3://{self._bucket}/{key}")

    async def exists(self, key: str) -> bool:
        try:
            await asyncio.to_thread(self._client.head_object, Bucket=self._bucket, Key=key)
            return True
        except ClientError as e:
            if _is_missing(e):
                return False
            raise UpstreamStoreError("blob", f"Failed to stat s3://{self._bucket}/{key}: {e}") from e
