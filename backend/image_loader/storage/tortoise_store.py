"""
Relational store adapters backed by Tortoise ORM.

Driver exceptions are translated at this boundary:
- IntegrityError -> ConflictError (unique login, unique telegram_id, unique image name)
- a row pointing at a user that no longer exists -> NotFoundError
- DoesNotExist -> NotFoundError
- any other Tortoise error -> StorageError
"""
from contextlib import asynccontextmanager, contextmanager
from typing import List

from tortoise.exceptions import BaseORMException, DoesNotExist, IntegrityError

from image_loader.core.errors import ConflictError, NotFoundError, StorageError
from image_loader.core.security import hash_password, verify_password
from image_loader.domain import Asset, ChatBinding, Identity
from image_loader.models import Image, TelegramBinding, User
from image_loader.storage.base import AssetMetadataStore, IdentityStore


@contextmanager
def _translate_errors(action: str):
    try:
        yield
    except IntegrityError as exc:
        raise ConflictError(f"failed to {action}: {exc}") from exc
    except DoesNotExist as exc:
        raise NotFoundError(f"failed to {action}: {exc}") from exc
    except BaseORMException as exc:
        raise StorageError(f"failed to {action}: {exc}") from exc


@asynccontextmanager
async def _owned_by(user_id: int, action: str):
    """
    Insert of a row owned by `user_id`. A missing owner is NotFoundError both
    before the insert and when the foreign key rejects it (user deleted meanwhile).
    """
    with _translate_errors(action):
        if not await User.filter(id=user_id).exists():
            raise NotFoundError(f"user {user_id} not found")
        try:
            yield
        except IntegrityError:
            if not await User.filter(id=user_id).exists():
                raise NotFoundError(f"user {user_id} not found") from None
            raise


def _to_identity(user: User) -> Identity:
    # password_hash stays inside the store
    return Identity(
        id=user.id,
        name=user.name,
        login=user.login,
        description=user.description or "",
    )


def _to_asset(image: Image) -> Asset:
    return Asset(id=image.id, user_id=image.user_id, name=image.name, extension=image.extension)


class TortoiseIdentityStore(IdentityStore):
    """Users (table `users`) and Telegram bindings (table `tg_auth`)."""

    async def create(self, identity: Identity) -> Identity:
        with _translate_errors("insert user"):
            user = await User.create(
                name=identity.name,
                login=identity.login,
                password_hash=hash_password(identity.password or ""),
                description=identity.description,
            )
        return _to_identity(user)

    async def get(self, identity_id: int) -> Identity:
        with _translate_errors("get user"):
            user = await User.get_or_none(id=identity_id)
        if user is None:
            raise NotFoundError(f"user {identity_id} not found")
        return _to_identity(user)

    async def update(self, identity: Identity) -> None:
        with _translate_errors("update user"):
            user = await User.get_or_none(id=identity.id)
            if user is None:
                raise NotFoundError(f"user {identity.id} not found")
            user.name = identity.name
            user.login = identity.login
            user.description = identity.description
            if identity.password:
                user.password_hash = hash_password(identity.password)
            await user.save()

    async def delete(self, identity_id: int) -> None:
        with _translate_errors("delete user"):
            deleted = await User.filter(id=identity_id).delete()
        if not deleted:
            raise NotFoundError(f"user {identity_id} not found")

    async def get_by_credentials(self, login: str, password: str) -> Identity:
        with _translate_errors("check credentials"):
            user = await User.get_or_none(login=login)
        if user is None or not verify_password(password, user.password_hash):
            raise NotFoundError("no user matches the given credentials")
        return _to_identity(user)

    async def get_binding(self, chat_id: int) -> ChatBinding:
        with _translate_errors("get telegram binding"):
            binding = await TelegramBinding.get_or_none(telegram_id=chat_id)
        if binding is None:
            raise NotFoundError(f"telegram account {chat_id} is not linked")
        return ChatBinding(id=binding.id, user_id=binding.user_id, chat_id=binding.telegram_id)

    async def create_binding(self, binding: ChatBinding) -> ChatBinding:
        async with _owned_by(binding.user_id, "create telegram binding"):
            row = await TelegramBinding.create(user_id=binding.user_id, telegram_id=binding.chat_id)
        return ChatBinding(id=row.id, user_id=row.user_id, chat_id=row.telegram_id)


class TortoiseAssetStore(AssetMetadataStore):
    """Image metadata (table `images`)."""

    async def create(self, asset: Asset) -> Asset:
        async with _owned_by(asset.user_id, "save image data to db"):
            image = await Image.create(user_id=asset.user_id, name=asset.name, extension=asset.extension)
        asset.id = image.id
        return asset

    async def list_for_user(self, user_id: int) -> List[Asset]:
        with _translate_errors("list images"):
            images = await Image.filter(user_id=user_id).order_by("id")
        return [_to_asset(image) for image in images]
