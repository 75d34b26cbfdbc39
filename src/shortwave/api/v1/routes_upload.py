"""Upload API routes."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortwave.auth.credentials import CredentialResolver, get_credential_resolver
from shortwave.models.upload import ErrorResponse, UploadResponse
from shortwave.services.upload.handler import UploadRequestHandler
from shortwave.uploader.factory import UploaderFactory, get_uploader_factory
from shortwave.uploader.progress import ProgressObserver

UPLOAD_PATH = "/api/upload"

router = APIRouter(prefix="/api", tags=["upload"])
logger = logging.getLogger(__name__)


def get_progress_observer() -> ProgressObserver | None:
    """Observer for upload progress; None selects the logging observer."""
    return None


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={500: {"model": ErrorResponse}},
)
async def upload_video(
    request: Request,
    resolver: CredentialResolver = Depends(get_credential_resolver),
    uploader_factory: UploaderFactory = Depends(get_uploader_factory),
    observer: ProgressObserver | None = Depends(get_progress_observer),
) -> JSONResponse:
    """Publish a multipart Shorts submission to YouTube.

    The body is read as a stream so the video never has to fit in memory.
    """
    handler = UploadRequestHandler(
        resolver=resolver,
        uploader_factory=uploader_factory,
        observer=observer,
    )
    return await handler.handle(request)


async def upload_method_not_allowed(request: Request, exc: StarletteHTTPException) -> Response:
    """Answer any non-POST method on the upload route with the JSON error shape."""
    if request.url.path != UPLOAD_PATH:
        return await http_exception_handler(request, exc)
    logger.debug("Rejected upload request method", extra={"method": request.method})
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content=ErrorResponse(error="Method not allowed").model_dump(),
        headers={"Allow": "POST"},
    )
