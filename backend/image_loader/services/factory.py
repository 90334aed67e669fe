"""
Service Factory

Builds the controller and its collaborators from settings.
"""
import datetime as dt
import logging

from minio import Minio

from image_loader.config import Settings
from image_loader.core.security import TokenCodec
from image_loader.services.controller import Controller
from image_loader.storage.base import ObjectStore
from image_loader.storage.memory import MemoryObjectStore
from image_loader.storage.minio_store import MinioObjectStore
from image_loader.storage.tortoise_store import TortoiseAssetStore, TortoiseIdentityStore

logger = logging.getLogger("uvicorn.error")


def get_token_codec(settings: Settings) -> TokenCodec:
    return TokenCodec(settings.jwt_secret, ttl=dt.timedelta(hours=settings.token_ttl_hours))


async def get_object_store(settings: Settings) -> ObjectStore:
    """
    Get the object store selected by OBJECT_STORE.

    - "minio": MinIO / S3 bucket (created on first start)
    - "memory": process-local dict, payloads are lost on restart
    """
    kind = settings.object_store.lower()
    if kind == "memory":
        logger.warning("[storage] OBJECT_STORE=memory: image payloads are kept in process memory only")
        return MemoryObjectStore()
    if kind != "minio":
        raise RuntimeError(f"Unknown OBJECT_STORE {settings.object_store!r}, expected 'minio' or 'memory'")
    if not settings.minio_access_key or not settings.minio_secret_key:
        raise RuntimeError("MinIO credentials missing. Please configure MINIO_ACCESS_KEY and MINIO_SECRET_KEY in .env")

    client = Minio(
        settings.minio_endpoint,
        access_key=settings.minio_access_key,
        secret_key=settings.minio_secret_key,
        secure=settings.minio_secure,
    )
    store = MinioObjectStore(
        client,
        settings.minio_bucket,
        url_expiry=dt.timedelta(seconds=settings.minio_url_expiry_seconds),
    )
    await store.ensure_bucket()
    logger.info("[storage] Using MinIO bucket %s at %s", settings.minio_bucket, settings.minio_endpoint)
    return store


def build_controller(settings: Settings, objects: ObjectStore, tokens: TokenCodec | None = None) -> Controller:
    """Controller over the Tortoise relational stores and the given object store."""
    return Controller(
        identities=TortoiseIdentityStore(),
        assets=TortoiseAssetStore(),
        objects=objects,
        tokens=tokens or get_token_codec(settings),
        store_timeout=settings.store_timeout_seconds,
    )
