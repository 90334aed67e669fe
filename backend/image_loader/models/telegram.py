# image_loader/models/telegram.py
from tortoise import fields, models

class TelegramBinding(models.Model):
    """
    Link between a Telegram account and a User.
    At most one binding exists per telegram_id; bindings are never rewritten.
    """
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField(
        "models.User",
        related_name="telegram_bindings",
        on_delete=fields.CASCADE
    )
    telegram_id = fields.BigIntField(unique=True, index=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "tg_auth"
