"""
Domain values passed between the API, the controller and the store adapters.

These are plain dataclasses, independent of any storage driver.
"""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Identity:
    """
    Primary account.

    `password` is only set on the way in (registration, update, login); stores
    never hand it back. `image_urls` is derived from the identity's images.
    """
    name: str
    login: str
    password: Optional[str] = None
    description: str = ""
    id: Optional[int] = None
    image_urls: List[str] = field(default_factory=list)


@dataclass
class Asset:
    """One uploaded image: metadata plus the payload handle."""
    user_id: int
    extension: str
    name: str = ""  # Stored object key, generated by the controller
    data: Optional[bytes] = None
    id: Optional[int] = None

    def __repr__(self):
        size = len(self.data) if self.data is not None else None
        return f"Asset(id={self.id}, user_id={self.user_id}, name='{self.name}', bytes={size})"


@dataclass
class ChatBinding:
    """Telegram chat account linked to an identity."""
    user_id: int
    chat_id: int
    id: Optional[int] = None
