# image_loader/api/v1/routers/users.py
from fastapi import APIRouter, Depends
from image_loader.api.v1.deps import get_controller, get_current_identity_id
from image_loader.schemas.user import RegisterIn, UserOut, UserUpdateIn
from image_loader.services.controller import Controller

router = APIRouter(prefix="/users", tags=["users"])

@router.post("")
async def register(body: RegisterIn, controller: Controller = Depends(get_controller)):
    """
    Register a new user account.

    Args:
        body: Request body containing name, login (unique), password and
            an optional description

    Returns:
        dict: Response containing:
            - success: bool
            - data: the created user (without password)

    Errors:
        409: Login already taken
    """
    identity = await controller.register_identity(body.to_identity())
    return {"success": True, "data": UserOut.from_identity(identity).model_dump()}

@router.get("/me")
async def me(
    caller_id: int = Depends(get_current_identity_id),
    controller: Controller = Depends(get_controller),
):
    """
    Get the authenticated user together with URLs of all their images.
    """
    identity = await controller.fetch_identity(caller_id)
    return {"success": True, "data": UserOut.from_identity(identity).model_dump()}

@router.get("/{user_id}")
async def get_user(
    user_id: int,
    caller_id: int = Depends(get_current_identity_id),
    controller: Controller = Depends(get_controller),
):
    """
    Get a user together with URLs of all their images (upload order).

    Errors:
        401: Missing or invalid token
        404: User not found
    """
    identity = await controller.fetch_identity(user_id)
    return {"success": True, "data": UserOut.from_identity(identity).model_dump()}

@router.put("/{user_id}")
async def update_user(
    user_id: int,
    body: UserUpdateIn,
    caller_id: int = Depends(get_current_identity_id),
    controller: Controller = Depends(get_controller),
):
    """
    Update the caller's own account.

    Errors:
        403: user_id is not the caller
        404: User not found
        409: New login already taken
    """
    await controller.update_identity(caller_id, body.to_identity(user_id))
    return {"success": True, "data": {"ok": True}}

@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    caller_id: int = Depends(get_current_identity_id),
    controller: Controller = Depends(get_controller),
):
    """
    Delete the caller's own account (image records and Telegram links go with it).

    Errors:
        403: user_id is not the caller
        404: User not found
    """
    await controller.delete_identity(caller_id, user_id)
    return {"success": True, "data": {"deleted": True}}
