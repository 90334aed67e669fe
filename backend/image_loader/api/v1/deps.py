from fastapi import Request

from image_loader.config import settings
from image_loader.core.errors import UnauthenticatedError
from image_loader.core.security import TokenCodec
from image_loader.services.controller import Controller

def get_controller(request: Request) -> Controller:
    """Controller built at startup (see main.on_startup)."""
    return request.app.state.controller

def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.tokens

async def get_current_identity_id(request: Request) -> int:
    """
    FastAPI dependency acting as the auth gate.

    Reads the token from the configured header (AUTH_HEADER, "Authorization" by
    default). Both the bare token and "Bearer <token>" are accepted.

    Returns:
        int: The verified identity id. Routes pass it on explicitly as the
        caller id; nothing downstream verifies the token again.

    Raises:
        UnauthenticatedError (401): If no token is provided
        InvalidTokenError (401): If the token does not verify; the message is
            the codec's reason (bad signature, expired, bad issuer, ...)

    Usage:
        @router.get("/protected")
        async def protected_route(caller_id: int = Depends(get_current_identity_id)):
            ...
    """
    token = (request.headers.get(settings.auth_header) or "").strip()
    if token.lower().startswith("bearer "):
        token = token.split(" ", 1)[1].strip()

    if not token:
        raise UnauthenticatedError("missing authorization token")

    return get_token_codec(request).verify(token)
