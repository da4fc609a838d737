"""S3 compatible object storage adapter.

boto3 is synchronous, so every call runs in a worker thread through
asyncio.to_thread to keep the event loop free.
"""

import asyncio
import logging
from typing import AsyncIterator, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ....config.settings import StarshipSettings
from ....core.exceptions import NotFoundError, StorageError
from ..entities.protocols import ObjectHead

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class S3ObjectStorage:
    """Object storage on any S3 compatible endpoint."""

    def __init__(self, settings: StarshipSettings):
        self.bucket = settings.bucket_name
        secret = settings.bucket_access_secret
        self._client = boto3.client(
            "s3",
            endpoint_url=settings.bucket_endpoint,
            region_name=settings.bucket_region,
            aws_access_key_id=settings.bucket_access_key,
            aws_secret_access_key=secret.get_secret_value() if secret else None,
            config=Config(s3={"addressing_style": "path" if settings.bucket_force_path_style else "auto"}),
        )

    async def _call(self, operation: str, fn, *args, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in ("404", "NoSuchKey", "NotFound"):
                raise NotFoundError() from e
            logger.error(f"S3 {operation} failed [{code}]: {e}")
            raise StorageError() from e
        except BotoCoreError as e:
            logger.error(f"S3 {operation} failed: {e}")
            raise StorageError() from e

    async def issue_upload_url(self, key: str, content_type: str, ttl: int) -> str:
        return await self._call(
            "presign put",
            self._client.generate_presigned_url,
            "put_object",
            Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
            ExpiresIn=ttl,
        )

    async def issue_download_url(self, key: str, ttl: int, filename_hint: Optional[str] = None) -> str:
        params = {"Bucket": self.bucket, "Key": key}
        if filename_hint:
            params["ResponseContentDisposition"] = f'attachment; filename="{filename_hint}"'
        return await self._call(
            "presign get", self._client.generate_presigned_url, "get_object", Params=params, ExpiresIn=ttl
        )

    async def head_object(self, key: str) -> ObjectHead:
        response = await self._call("head", self._client.head_object, Bucket=self.bucket, Key=key)
        return ObjectHead(size=int(response["ContentLength"]), content_type=response.get("ContentType"))

    async def delete_object(self, key: str) -> None:
        await self._call("delete", self._client.delete_object, Bucket=self.bucket, Key=key)

    async def delete_objects(self, keys: List[str]) -> None:
        if not keys:
            return
        await self._call(
            "bulk delete",
            self._client.delete_objects,
            Bucket=self.bucket,
            Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
        )

    async def copy_object(self, source_key: str, destination_key: str) -> None:
        await self._call(
            "copy",
            self._client.copy_object,
            Bucket=self.bucket,
            Key=destination_key,
            CopySource={"Bucket": self.bucket, "Key": source_key},
        )

    async def iter_object(self, key: str) -> AsyncIterator[bytes]:
        response = await self._call("get", self._client.get_object, Bucket=self.bucket, Key=key)
        body = response["Body"]
        try:
            while True:
                chunk = await asyncio.to_thread(body.read, CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        finally:
            body.close()

    def check_connection(self) -> bool:
        """Bucket reachability check used by the health endpoint."""
        try:
            self._client.head_bucket(Bucket=self.bucket)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 health check failed: {e}")
            return False
