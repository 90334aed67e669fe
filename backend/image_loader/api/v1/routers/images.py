# image_loader/api/v1/routers/images.py
from fastapi import APIRouter, Depends, Query, Request
from image_loader.api.v1.deps import get_controller, get_current_identity_id
from image_loader.domain import Asset
from image_loader.schemas.image import ImageOut
from image_loader.services.controller import Controller

router = APIRouter(prefix="/images", tags=["images"])

@router.post("")
async def upload_image(
    request: Request,
    extension: str = Query(..., min_length=1, max_length=17),
    caller_id: int = Depends(get_current_identity_id),
    controller: Controller = Depends(get_controller),
):
    """
    Upload an image for the authenticated user.

    The raw request body is the image payload; the original file extension is
    passed as a query parameter (e.g. `?extension=.png`). The stored object name
    is generated by the server.

    The extension is an optional leading dot followed by 1-16 letters or
    digits. A missing dot is added, so `?extension=jpg` is stored as `.jpg`.

    Returns:
        dict: Response containing:
            - success: bool
            - data: id, generated name and extension of the stored image

    Errors:
        400: Empty body or invalid extension
        500: Metadata or payload write failed
    """
    data = await request.body()
    asset = await controller.upload_asset(Asset(user_id=caller_id, extension=extension, data=data))
    return {"success": True, "data": ImageOut(id=asset.id, name=asset.name, extension=asset.extension).model_dump()}
