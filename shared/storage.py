"""
Object Storage
S3-compatible blob store holding raw video binaries.
"""
import asyncio
from typing import List, Optional
from urllib.parse import unquote, urlparse

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import ClientError

from .config import (
    SIGNED_URL_EXPIRY_SECONDS,
    STORAGE_ACCESS_KEY_ID,
    STORAGE_BUCKET,
    STORAGE_ENDPOINT_URL,
    STORAGE_REGION,
    STORAGE_SECRET_ACCESS_KEY,
)

logger = structlog.get_logger(__name__)


def create_s3_client():
    """S3 client built from environment configuration."""
    return boto3.client(
        "s3",
        endpoint_url=STORAGE_ENDPOINT_URL,
        aws_access_key_id=STORAGE_ACCESS_KEY_ID,
        aws_secret_access_key=STORAGE_SECRET_ACCESS_KEY,
        region_name=STORAGE_REGION,
        config=Config(signature_version="s3v4"),
    )


class BlobStorage:
    """Video binaries addressed by object path within one bucket.

    boto3 is synchronous, so network calls run in a worker thread.
    """

    def __init__(self, client=None, bucket: str = STORAGE_BUCKET):
        self.client = client or create_s3_client()
        self.bucket = bucket

    def resolve_object_path(self, video_url: str) -> str:
        """
        Turn a storage URL into an object path.

        Accepts a bare object path, a virtual-hosted or path-style bucket URL,
        or a presigned URL (the query string is ignored).
        """
        parsed = urlparse(video_url)
        if not parsed.scheme:
            return video_url.lstrip("/")

        path = unquote(parsed.path).lstrip("/")
        bucket_prefix = f"{self.bucket}/"
        if path.startswith(bucket_prefix):
            path = path[len(bucket_prefix):]
        return path

    async def exists(self, object_path: str) -> bool:
        try:
            await asyncio.to_thread(self.client.head_object, Bucket=self.bucket, Key=object_path)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise

    def get_read_url(self, object_path: str, expires_in: int = SIGNED_URL_EXPIRY_SECONDS) -> str:
        """Presigned GET URL valid for ``expires_in`` seconds."""
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": object_path},
            ExpiresIn=expires_in,
        )

    async def download_to(self, object_path: str, destination: str) -> str:
        await asyncio.to_thread(self.client.download_file, self.bucket, object_path, destination)
        return destination

    async def list_objects(self, prefix: str) -> List[str]:
        def _list() -> List[str]:
            keys = []
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                keys.extend(item["Key"] for item in page.get("Contents", []))
            return keys

        return await asyncio.to_thread(_list)

    async def delete(self, object_path: str) -> None:
        await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=object_path)

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every object under ``prefix``; returns how many were removed."""
        keys = await self.list_objects(prefix)
        for key in keys:
            await self.delete(key)
        logger.info("Deleted objects under prefix", prefix=prefix, count=len(keys))
        return len(keys)


def video_id_from_object_path(object_path: str, prefix: Optional[str] = None) -> str:
    """``videos/pasta-night.mp4`` -> ``pasta-night``"""
    name = object_path
    if prefix and name.startswith(prefix):
        name = name[len(prefix):]
    name = name.rsplit("/", 1)[-1]
    stem, dot, _ = name.rpartition(".")
    return stem if dot and stem else name
