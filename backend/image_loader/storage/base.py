"""
Store Abstract Interfaces

The controller only talks to these capability sets; concrete adapters live next
to this module (Tortoise ORM, MinIO, in-memory).

Lookups raise NotFoundError when the entity is absent and StorageError for any
other driver failure, so callers can tell the two apart.
"""
from abc import ABC, abstractmethod
from typing import List

from image_loader.domain import Asset, ChatBinding, Identity


class IdentityStore(ABC):
    """Primary identities and their chat bindings."""

    @abstractmethod
    async def create(self, identity: Identity) -> Identity:
        """
        Persist a new identity and return it with its id assigned.

        Raises ConflictError when the login is already taken.
        """
        pass

    @abstractmethod
    async def get(self, identity_id: int) -> Identity:
        pass

    @abstractmethod
    async def update(self, identity: Identity) -> None:
        """
        Overwrite name, login and description of `identity.id`.
        The password is only changed when `identity.password` is set.
        """
        pass

    @abstractmethod
    async def delete(self, identity_id: int) -> None:
        pass

    @abstractmethod
    async def get_by_credentials(self, login: str, password: str) -> Identity:
        """Return the identity matching both login and password, else NotFoundError."""
        pass

    @abstractmethod
    async def get_binding(self, chat_id: int) -> ChatBinding:
        pass

    @abstractmethod
    async def create_binding(self, binding: ChatBinding) -> ChatBinding:
        """Raises ConflictError when `chat_id` is already bound."""
        pass


class AssetMetadataStore(ABC):
    """Metadata records of uploaded assets."""

    @abstractmethod
    async def create(self, asset: Asset) -> Asset:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: int) -> List[Asset]:
        """Assets owned by `user_id`, oldest first. Payloads are not loaded."""
        pass


class ObjectStore(ABC):
    """Binary payloads keyed by the asset's stored name."""

    @abstractmethod
    async def put(self, asset: Asset) -> None:
        pass

    @abstractmethod
    async def get_urls(self, assets: List[Asset]) -> List[str]:
        """Presentable URLs, one per asset, in input order."""
        pass

    @abstractmethod
    async def get_objects(self, assets: List[Asset]) -> List[bytes]:
        """Payloads, one per asset, in input order."""
        pass
