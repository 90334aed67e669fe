"""
Services Module

- controller: orchestration of identities, images and Telegram links across stores
- factory: builds the controller and the object store from settings
- telegram_bot: Telegram Bot API front end driving the controller
"""

from .controller import Controller
from .factory import (
    build_controller,
    get_object_store,
    get_token_codec,
)
from .telegram_bot import (
    TelegramBot,
    TelegramClient,
)

__all__ = [
    "Controller",
    "build_controller",
    "get_object_store",
    "get_token_codec",
    "TelegramBot",
    "TelegramClient",
]
