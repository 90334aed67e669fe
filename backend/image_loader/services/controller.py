"""
Orchestration controller.

Sequences every user-facing operation across the token codec, the identity
store, the image metadata store and the object store. The controller keeps no
mutable state of its own; consistency under concurrent requests is whatever the
stores guarantee per call (no transaction spans two stores).

Cancellation: all operations are coroutines, so cancelling the calling task
aborts the operation at its current store call. Each store call also runs under
a deadline (`store_timeout`). There are no retries anywhere.
"""
import asyncio
import logging
import re
import uuid
from typing import Awaitable, List, Optional, TypeVar

from image_loader.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StorageError,
    StorageTimeoutError,
    UnauthenticatedError,
    ValidationError,
)
from image_loader.core.security import TokenCodec
from image_loader.domain import Asset, ChatBinding, Identity
from image_loader.storage.base import AssetMetadataStore, IdentityStore, ObjectStore

logger = logging.getLogger("uvicorn.error")

T = TypeVar("T")

_EXTENSION_RE = re.compile(r"^\.?[A-Za-z0-9]{1,16}$")


class Controller:
    def __init__(
        self,
        identities: IdentityStore,
        assets: AssetMetadataStore,
        objects: ObjectStore,
        tokens: TokenCodec,
        store_timeout: Optional[float] = None,
    ):
        self._identities = identities
        self._assets = assets
        self._objects = objects
        self._tokens = tokens
        self._timeout = store_timeout

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        """Run one store call under the deadline and tag storage failures with the operation."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise StorageTimeoutError(f"{operation}: store call exceeded {self._timeout}s") from exc
        except StorageError as exc:
            raise type(exc)(f"{operation}: {exc.message}") from exc

    # ---------- identities ----------
    async def register_identity(self, identity: Identity) -> Identity:
        return await self._call("register identity", self._identities.create(identity))

    async def fetch_identity(self, identity_id: int) -> Identity:
        """
        Load an identity together with URLs of all its images (in upload order).
        Any failure aborts the call; a partially populated identity is never returned.
        """
        identity = await self._call("fetch identity", self._identities.get(identity_id))
        assets = await self._call("fetch identity", self._assets.list_for_user(identity.id))
        urls = await self._call("fetch identity", self._objects.get_urls(assets))
        identity.image_urls = list(urls)
        return identity

    async def update_identity(self, caller_id: int, identity: Identity) -> None:
        if caller_id != identity.id:
            raise ForbiddenError("users do not match")
        await self._call("update identity", self._identities.update(identity))

    async def delete_identity(self, caller_id: int, identity_id: int) -> None:
        if caller_id != identity_id:
            raise ForbiddenError("users do not match")
        await self._call("delete identity", self._identities.delete(identity_id))

    # ---------- authentication ----------
    async def authenticate(self, login: str, password: str) -> str:
        """Return a signed token for the identity owning (login, password)."""
        identity = await self._check_credentials("authenticate", login, password)
        return self._tokens.issue(identity.id)

    async def _check_credentials(self, operation: str, login: str, password: str) -> Identity:
        try:
            return await self._call(operation, self._identities.get_by_credentials(login, password))
        except NotFoundError as exc:
            raise UnauthenticatedError("invalid login or password") from exc

    # ---------- images ----------
    async def upload_asset(self, asset: Asset) -> Asset:
        """
        Store a new image for `asset.user_id`.

        The object key is always generated here (uuid4 + extension). Metadata is
        written first and the payload second; when the payload write fails the
        metadata row is left behind and the failure is reported to the caller.
        """
        if not asset.data:
            raise ValidationError("image payload is empty")
        extension = (asset.extension or "").strip()
        if not _EXTENSION_RE.match(extension):
            raise ValidationError(f"invalid file extension {asset.extension!r}")
        if not extension.startswith("."):
            extension = "." + extension

        asset.extension = extension
        asset.name = str(uuid.uuid4()) + extension

        await self._call("save image data to db", self._assets.create(asset))
        try:
            await self._call("put image to object store", self._objects.put(asset))
        except Exception:
            logger.warning("[upload] image record %s (user %s) has no payload: object write failed",
                           asset.name, asset.user_id)
            raise
        return asset

    # ---------- telegram ----------
    async def link_chat_identity(self, chat_id: int, login: str, password: str) -> None:
        """
        Bind a Telegram account to the identity owning (login, password).

        An account that is already bound is left untouched and the call still
        succeeds, so callers cannot tell "linked now" from "was linked".
        """
        identity = await self._check_credentials("link telegram account", login, password)
        try:
            await self._call("link telegram account", self._identities.get_binding(chat_id))
            return
        except NotFoundError:
            pass
        try:
            await self._call(
                "link telegram account",
                self._identities.create_binding(ChatBinding(user_id=identity.id, chat_id=chat_id)),
            )
        except ConflictError:
            # bound concurrently by another event
            logger.info("[telegram] account %s was linked concurrently", chat_id)

    async def fetch_assets_for_chat_identity(self, chat_id: int) -> List[bytes]:
        """Payloads of every image of the identity linked to `chat_id`, in upload order."""
        binding = await self._call("fetch telegram images", self._identities.get_binding(chat_id))
        assets = await self._call("fetch telegram images", self._assets.list_for_user(binding.user_id))
        if not assets:
            return []
        return await self._call("fetch telegram images", self._objects.get_objects(assets))
