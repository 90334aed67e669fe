# image_loader/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports.

Models exported:
- User: Primary account and credentials
- Image: Metadata of an uploaded image (payload lives in the object store)
- TelegramBinding: Telegram account linked to a User
"""
from .user import User
from .image import Image
from .telegram import TelegramBinding
