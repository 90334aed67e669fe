"""
Object store adapter for MinIO (or any S3 compatible service).

The minio SDK is blocking, so every call runs in a worker thread; an awaiting
caller can be cancelled without waiting for the thread to finish.
"""
import asyncio
import datetime as dt
import io
import logging
import mimetypes
from typing import List

import urllib3
from minio import Minio
from minio.error import MinioException

from image_loader.core.errors import StorageError
from image_loader.domain import Asset
from image_loader.storage.base import ObjectStore

logger = logging.getLogger("uvicorn.error")

_MISSING_OBJECT_CODES = ("NoSuchKey", "NoSuchObject")


class MinioObjectStore(ObjectStore):
    """Payloads stored as objects named after Asset.name in a single bucket."""

    def __init__(self, client: Minio, bucket: str, url_expiry: dt.timedelta = dt.timedelta(hours=1)):
        self._client = client
        self._bucket = bucket
        self._url_expiry = url_expiry

    async def ensure_bucket(self) -> None:
        """Create the bucket on first start."""
        try:
            exists = await asyncio.to_thread(self._client.bucket_exists, self._bucket)
            if not exists:
                await asyncio.to_thread(self._client.make_bucket, self._bucket)
                logger.info("[minio] created bucket %s", self._bucket)
        except (MinioException, urllib3.exceptions.HTTPError) as exc:
            raise StorageError(f"failed to prepare bucket {self._bucket}: {exc}") from exc

    async def put(self, asset: Asset) -> None:
        data = asset.data or b""
        content_type = mimetypes.guess_type(asset.name)[0] or "application/octet-stream"
        try:
            await asyncio.to_thread(
                self._client.put_object,
                self._bucket,
                asset.name,
                io.BytesIO(data),
                len(data),
                content_type=content_type,
            )
        except (MinioException, urllib3.exceptions.HTTPError) as exc:
            raise StorageError(f"failed to put object {asset.name}: {exc}") from exc

    async def get_urls(self, assets: List[Asset]) -> List[str]:
        urls = []
        for asset in assets:
            try:
                url = await asyncio.to_thread(
                    self._client.presigned_get_object,
                    self._bucket,
                    asset.name,
                    expires=self._url_expiry,
                )
            except (MinioException, urllib3.exceptions.HTTPError) as exc:
                raise StorageError(f"failed to presign object {asset.name}: {exc}") from exc
            urls.append(url)
        return urls

    async def get_objects(self, assets: List[Asset]) -> List[bytes]:
        objects = []
        for asset in assets:
            objects.append(await asyncio.to_thread(self._read_object, asset.name))
        return objects

    def _read_object(self, name: str) -> bytes:
        response = None
        try:
            response = self._client.get_object(self._bucket, name)
            return response.read()
        except MinioException as exc:
            if getattr(exc, "code", None) in _MISSING_OBJECT_CODES:
                raise StorageError(f"object {name} has no payload in bucket {self._bucket}") from exc
            raise StorageError(f"failed to get object {name}: {exc}") from exc
        except urllib3.exceptions.HTTPError as exc:
            raise StorageError(f"failed to get object {name}: {exc}") from exc
        finally:
            if response is not None:
                response.close()
                response.release_conn()
