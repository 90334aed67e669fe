"""
Renders core errors into HTTP responses.

Every ServiceError becomes `{"message": <reason>, "error": true}` with the
status code the error class carries.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from image_loader.core.errors import ServiceError

logger = logging.getLogger("uvicorn.error")


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, "error": True})


def register_exception_handlers(app: FastAPI) -> None:
    """Install the ServiceError handler on the app."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn("%s %s -> %d %s: %s", request.method, request.url.path,
               exc.status_code, exc.error_code, exc.message)
        return error_response(exc.status_code, exc.message)
