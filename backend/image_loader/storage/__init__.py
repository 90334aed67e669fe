"""
Store adapters.

- base: IdentityStore / AssetMetadataStore / ObjectStore interfaces
- tortoise_store: relational adapters (Tortoise ORM)
- minio_store: object store adapter (MinIO SDK)
- memory: in-memory adapters for tests and local runs
"""
from .base import AssetMetadataStore, IdentityStore, ObjectStore
