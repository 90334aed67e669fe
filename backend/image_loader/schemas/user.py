# image_loader/schemas/user.py
"""
Pydantic schemas for user endpoints.
Passwords only ever appear in request models.
"""
from pydantic import BaseModel, Field
from typing import List, Optional

from image_loader.domain import Identity

class RegisterIn(BaseModel):
    """
    Request model for registration.
    """
    name: str = Field(min_length=1, max_length=256)  # Display name
    login: str = Field(min_length=1, max_length=256)  # Must be unique
    password: str = Field(min_length=1)
    description: str = ""

    def to_identity(self) -> Identity:
        return Identity(name=self.name, login=self.login, password=self.password, description=self.description)

class UserUpdateIn(BaseModel):
    """
    Request model for updating the caller's own account.
    Password is optional; when omitted the current password is kept.
    """
    name: str = Field(min_length=1, max_length=256)
    login: str = Field(min_length=1, max_length=256)
    password: Optional[str] = None
    description: str = ""

    def to_identity(self, identity_id: int) -> Identity:
        return Identity(id=identity_id, name=self.name, login=self.login,
                        password=self.password or None, description=self.description)

class UserOut(BaseModel):
    """
    User information returned by the API (never contains the password).
    """
    id: int
    name: str
    login: str
    description: str = ""
    imageUrls: List[str] = []  # Presigned URLs, in upload order

    @classmethod
    def from_identity(cls, identity: Identity) -> "UserOut":
        return cls(
            id=identity.id,
            name=identity.name,
            login=identity.login,
            description=identity.description,
            imageUrls=list(identity.image_urls),
        )
