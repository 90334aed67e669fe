# image_loader/models/image.py
"""
Database model for uploaded images.
Only metadata lives here; the payload is stored in the object store under `name`.
"""
from tortoise import fields, models

class Image(models.Model):
    """
    Image metadata model.

    Relationships:
    - Belongs to a User (many-to-one); deleted together with its owner
    """
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField(
        "models.User",
        related_name="images",
        on_delete=fields.CASCADE
    )
    name = fields.CharField(max_length=128, unique=True)  # Server-generated object key (uuid4 + extension)
    extension = fields.CharField(max_length=17)  # Original file extension, e.g. ".png"
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "images"
