# image_loader/schemas/image.py
"""
Pydantic schemas for image upload.
"""
from pydantic import BaseModel

class ImageOut(BaseModel):
    """
    Stored image metadata returned after upload.
    """
    id: int
    name: str  # Server-generated object name (uuid4 + extension)
    extension: str
