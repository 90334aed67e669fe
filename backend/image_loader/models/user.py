# image_loader/models/user.py
"""
Database model for users.
Represents a primary account that owns uploaded images and chat bindings.
"""
from tortoise import fields, models

class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many Images (one-to-many, via related_name="images")
    - Has many TelegramBindings (one-to-many, via related_name="telegram_bindings")

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Login must be unique across all users
    """
    id = fields.IntField(pk=True)  # Primary key: immutable numeric identity id
    name = fields.CharField(max_length=256)  # Display name
    login = fields.CharField(
        max_length=256,
        unique=True,
        index=True
    )  # Login name (must be unique, indexed for credential lookups)
    password_hash = fields.CharField(max_length=255)  # Argon2 hash, never plain text
    description = fields.TextField(null=True)  # Free-text profile description
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name
