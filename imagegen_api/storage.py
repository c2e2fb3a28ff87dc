"""S3-compatible object storage (Cloudflare R2 in production)."""

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from imagegen_api.config import Settings
from imagegen_api.errors import StorageUnavailable

logger = logging.getLogger(__name__)


def build_s3_client(current: Settings) -> Any:
    return boto3.client(
        "s3",
        endpoint_url=current.storage_endpoint or None,
        aws_access_key_id=current.storage_access_key or None,
        aws_secret_access_key=current.storage_secret_key or None,
        region_name=current.storage_region or "auto",
        config=Config(retries={"max_attempts": 1, "mode": "standard"}),
    )


class StorageUploader:
    def __init__(self, client: Any, bucket: str, public_base_url: str) -> None:
        self._client = client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, current: Settings) -> "StorageUploader":
        base = current.public_base_url
        if not base.strip():
            base = f"{current.storage_endpoint.rstrip('/')}/{current.storage_bucket}"
        return cls(build_s3_client(current), current.storage_bucket, base)

    async def upload(self, data: bytes, key: str, content_type: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError, OSError) as exc:
            raise StorageUnavailable(str(exc)) from exc
        logger.info("uploaded s3://%s/%s (%d bytes)", self.bucket, key, len(data), extra={"key": key})

    def public_url_for(self, key: str) -> str:
        # Derived only; the object is never probed.
        return f"{self.public_base_url}/{quote(key)}"
