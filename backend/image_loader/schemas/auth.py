# image_loader/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request/response models for login.
"""
from pydantic import BaseModel

class LoginRequest(BaseModel):
    """
    Request model for user login endpoint.
    Contains credentials for authentication.
    """
    login: str  # User login name
    password: str  # User password (plain text, checked against the stored hash)

class LoginResponse(BaseModel):
    """
    Response model for successful login.
    Returns the signed token to send in the Authorization header.
    """
    accessToken: str  # JWT access token, valid for 24 hours
