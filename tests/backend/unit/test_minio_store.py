"""
Unit tests for storage.minio_store with a mocked minio client.
"""
import datetime as dt
from unittest.mock import MagicMock

import pytest
from minio.error import MinioException

from image_loader.core.errors import StorageError
from image_loader.domain import Asset
from image_loader.storage.minio_store import MinioObjectStore


pytestmark = pytest.mark.asyncio


def _assets(*names):
    return [Asset(user_id=1, name=name, extension=".png") for name in names]


def _minio_error(code):
    exc = MinioException(f"{code}: boom")
    exc.code = code
    return exc


async def test_ensure_bucket_creates_missing_bucket():
    client = MagicMock()
    client.bucket_exists.return_value = False
    await MinioObjectStore(client, "images").ensure_bucket()
    client.make_bucket.assert_called_once_with("images")


async def test_ensure_bucket_keeps_existing_bucket():
    client = MagicMock()
    client.bucket_exists.return_value = True
    await MinioObjectStore(client, "images").ensure_bucket()
    client.make_bucket.assert_not_called()


async def test_put_uses_stored_name_and_length():
    client = MagicMock()
    store = MinioObjectStore(client, "images")
    await store.put(Asset(user_id=1, name="abc.png", extension=".png", data=b"12345"))

    args, kwargs = client.put_object.call_args
    assert args[0] == "images"
    assert args[1] == "abc.png"
    assert args[2].read() == b"12345"
    assert args[3] == 5
    assert kwargs["content_type"] == "image/png"


async def test_put_failure_is_storage_error():
    client = MagicMock()
    client.put_object.side_effect = _minio_error("InternalError")
    with pytest.raises(StorageError, match="abc.png"):
        await MinioObjectStore(client, "images").put(Asset(user_id=1, name="abc.png", extension=".png", data=b"x"))


async def test_get_urls_preserves_order():
    client = MagicMock()
    client.presigned_get_object.side_effect = lambda bucket, name, expires: f"http://minio/{bucket}/{name}"
    store = MinioObjectStore(client, "images", url_expiry=dt.timedelta(minutes=5))

    urls = await store.get_urls(_assets("b.png", "a.png", "c.png"))

    assert urls == ["http://minio/images/b.png", "http://minio/images/a.png", "http://minio/images/c.png"]
    assert client.presigned_get_object.call_args.kwargs["expires"] == dt.timedelta(minutes=5)


async def test_get_objects_preserves_order_and_releases_connections():
    responses = {}

    def get_object(bucket, name):
        response = MagicMock()
        response.read.return_value = name.encode()
        responses[name] = response
        return response

    client = MagicMock()
    client.get_object.side_effect = get_object
    payloads = await MinioObjectStore(client, "images").get_objects(_assets("2.png", "1.png"))

    assert payloads == [b"2.png", b"1.png"]
    for response in responses.values():
        response.close.assert_called_once()
        response.release_conn.assert_called_once()


async def test_get_objects_missing_key_is_storage_error():
    client = MagicMock()
    client.get_object.side_effect = _minio_error("NoSuchKey")
    with pytest.raises(StorageError, match="has no payload"):
        await MinioObjectStore(client, "images").get_objects(_assets("gone.png"))


async def test_get_objects_other_failure_is_storage_error():
    client = MagicMock()
    client.get_object.side_effect = _minio_error("AccessDenied")
    with pytest.raises(StorageError):
        await MinioObjectStore(client, "images").get_objects(_assets("x.png"))
