"""
In-memory store adapters.

Used by the test suite and by OBJECT_STORE=memory local runs. Every operation
completes without yielding to the event loop, so each one is atomic with respect
to other tasks, which is the same per-operation guarantee the real stores give.
"""
import hmac
from dataclasses import replace
from typing import Dict, List, Optional

from image_loader.core.errors import ConflictError, NotFoundError, StorageError
from image_loader.domain import Asset, ChatBinding, Identity
from image_loader.storage.base import AssetMetadataStore, IdentityStore, ObjectStore


class MemoryIdentityStore(IdentityStore):
    def __init__(self, assets: Optional["MemoryAssetStore"] = None):
        # image records to cascade into, like the images.user_id foreign key
        self._assets = assets
        self.identities: Dict[int, Identity] = {}
        self.bindings: Dict[int, ChatBinding] = {}
        self._next_id = 1
        self._next_binding_id = 1

    def _public(self, identity: Identity) -> Identity:
        return replace(identity, password=None, image_urls=[])

    async def create(self, identity: Identity) -> Identity:
        if any(existing.login == identity.login for existing in self.identities.values()):
            raise ConflictError(f"login {identity.login!r} already exists")
        stored = replace(identity, id=self._next_id, password=identity.password or "", image_urls=[])
        self._next_id += 1
        self.identities[stored.id] = stored
        return self._public(stored)

    async def get(self, identity_id: int) -> Identity:
        identity = self.identities.get(identity_id)
        if identity is None:
            raise NotFoundError(f"user {identity_id} not found")
        return self._public(identity)

    async def update(self, identity: Identity) -> None:
        current = self.identities.get(identity.id)
        if current is None:
            raise NotFoundError(f"user {identity.id} not found")
        if any(other.login == identity.login and other.id != identity.id for other in self.identities.values()):
            raise ConflictError(f"login {identity.login!r} already exists")
        self.identities[identity.id] = replace(
            current,
            name=identity.name,
            login=identity.login,
            description=identity.description,
            password=identity.password or current.password,
        )

    async def delete(self, identity_id: int) -> None:
        if self.identities.pop(identity_id, None) is None:
            raise NotFoundError(f"user {identity_id} not found")
        if self._assets is not None:
            self._assets.drop_user(identity_id)
        for chat_id in [c for c, b in self.bindings.items() if b.user_id == identity_id]:
            del self.bindings[chat_id]

    async def get_by_credentials(self, login: str, password: str) -> Identity:
        for identity in self.identities.values():
            if identity.login == login and hmac.compare_digest(identity.password.encode(), password.encode()):
                return self._public(identity)
        raise NotFoundError("no user matches the given credentials")

    async def get_binding(self, chat_id: int) -> ChatBinding:
        binding = self.bindings.get(chat_id)
        if binding is None:
            raise NotFoundError(f"telegram account {chat_id} is not linked")
        return replace(binding)

    async def create_binding(self, binding: ChatBinding) -> ChatBinding:
        if binding.chat_id in self.bindings:
            raise ConflictError(f"telegram account {binding.chat_id} is already linked")
        if binding.user_id not in self.identities:
            raise NotFoundError(f"user {binding.user_id} not found")
        stored = replace(binding, id=self._next_binding_id)
        self._next_binding_id += 1
        self.bindings[stored.chat_id] = stored
        return replace(stored)


class MemoryAssetStore(AssetMetadataStore):
    def __init__(self):
        self.assets: List[Asset] = []
        self._next_id = 1

    async def create(self, asset: Asset) -> Asset:
        if any(existing.name == asset.name for existing in self.assets):
            raise ConflictError(f"image {asset.name} already exists")
        asset.id = self._next_id
        self._next_id += 1
        self.assets.append(replace(asset, data=None))
        return asset

    async def list_for_user(self, user_id: int) -> List[Asset]:
        return [replace(asset) for asset in self.assets if asset.user_id == user_id]

    def drop_user(self, user_id: int) -> None:
        self.assets = [asset for asset in self.assets if asset.user_id != user_id]


class MemoryObjectStore(ObjectStore):
    def __init__(self, base_url: str = "memory://images"):
        self.objects: Dict[str, bytes] = {}
        self._base_url = base_url.rstrip("/")

    async def put(self, asset: Asset) -> None:
        self.objects[asset.name] = bytes(asset.data or b"")

    async def get_urls(self, assets: List[Asset]) -> List[str]:
        return [f"{self._base_url}/{asset.name}" for asset in assets]

    async def get_objects(self, assets: List[Asset]) -> List[bytes]:
        payloads = []
        for asset in assets:
            if asset.name not in self.objects:
                raise StorageError(f"object {asset.name} has no payload")
            payloads.append(self.objects[asset.name])
        return payloads
