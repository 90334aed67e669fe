# image_loader/api/v1/routers/auth.py
from fastapi import APIRouter, Depends
from image_loader.api.v1.deps import get_controller
from image_loader.schemas.auth import LoginRequest, LoginResponse
from image_loader.services.controller import Controller

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/login")
async def login(payload: LoginRequest, controller: Controller = Depends(get_controller)):
    """
    Authenticate with login and password and issue an access token.

    Args:
        payload: Request body containing login and password

    Returns:
        dict: Response containing:
            - success: bool (always True on success)
            - data: dict with accessToken (JWT, valid for 24 hours)

    Errors:
        401: If no user matches the credentials
    """
    token = await controller.authenticate(payload.login, payload.password)
    return {"success": True, "data": LoginResponse(accessToken=token).model_dump()}
