"""Lifecycle of a single upload request."""

import asyncio
import contextlib
import logging
import threading
from enum import Enum
from pathlib import Path
from uuid import uuid4

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from shortwave.auth.credentials import CredentialResolver
from shortwave.core.config import settings
from shortwave.core.exceptions import ShortwaveError, ValidationError
from shortwave.core.logging import upload_id_context
from shortwave.models.upload import ErrorResponse, StagedFile, UploadResponse, VideoMetadata
from shortwave.services.upload.decoder import MultipartDecoder
from shortwave.services.upload.metadata import normalize_metadata
from shortwave.storage.temp_storage import TempStorageManager
from shortwave.uploader.base import AuthenticatedUploader
from shortwave.uploader.factory import UploaderFactory
from shortwave.uploader.progress import LoggingProgressObserver, ProgressObserver

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Unexpected error during upload."


class UploadStage(str, Enum):
    """Stages a request moves through; any failure jumps to RESPONDING."""

    IDLE = "idle"
    DECODING = "decoding"
    NORMALIZING = "normalizing"
    AUTHENTICATING = "authenticating"
    UPLOADING = "uploading"
    RESPONDING = "responding"
    CLEANED_UP = "cleaned_up"


def ensure_uploadable(video: StagedFile) -> None:
    """Fail before any remote call if the staged file is missing or empty."""
    path = Path(video.path)
    if not path.is_file() or path.stat().st_size == 0:
        raise ValidationError("uploaded video file is empty")


class UploadRequestHandler:
    """Runs decode, normalize, authenticate, upload and respond for one request.

    The temp directory is released after the response has been built,
    whichever stage failed. Exactly one of ``{"videoId"}`` or ``{"error"}``
    is returned.
    """

    def __init__(
        self,
        resolver: CredentialResolver,
        uploader_factory: UploaderFactory,
        storage: TempStorageManager | None = None,
        decoder: MultipartDecoder | None = None,
        observer: ProgressObserver | None = None,
        poll_interval: float | None = None,
    ):
        self.resolver = resolver
        self.uploader_factory = uploader_factory
        self.storage = storage or TempStorageManager()
        self.decoder = decoder or MultipartDecoder()
        self.observer = observer
        self.poll_interval = poll_interval if poll_interval is not None else settings.DISCONNECT_POLL_SECONDS
        self.stage = UploadStage.IDLE

    def _advance(self, stage: UploadStage) -> None:
        logger.debug(
            "Upload stage changed",
            extra={"from_stage": self.stage.value, "to_stage": stage.value},
        )
        self.stage = stage

    async def handle(self, request: Request) -> JSONResponse:
        upload_id = str(uuid4())
        token = upload_id_context.set(upload_id)
        directory = None

        try:
            try:
                directory = self.storage.acquire()

                self._advance(UploadStage.DECODING)
                submission = await self.decoder.decode(request.headers, request.stream(), directory)

                self._advance(UploadStage.NORMALIZING)
                metadata = normalize_metadata(submission.fields)
                ensure_uploadable(submission.video)

                self._advance(UploadStage.AUTHENTICATING)
                service = await run_in_threadpool(self.resolver.resolve)
                uploader = self.uploader_factory(service)

                self._advance(UploadStage.UPLOADING)
                video_id = await self._upload(request, uploader, submission.video, metadata)

                self._advance(UploadStage.RESPONDING)
                logger.info(
                    "Upload request completed",
                    extra={"video_id": video_id, "original_filename": submission.video.original_filename},
                )
                return JSONResponse(
                    status_code=status.HTTP_200_OK,
                    content=UploadResponse(videoId=video_id).model_dump(),
                )

            except ShortwaveError as e:
                failed_stage = self.stage
                self._advance(UploadStage.RESPONDING)
                logger.error(
                    "Upload failed",
                    extra={
                        "stage": failed_stage.value,
                        "error_type": e.__class__.__name__,
                        "error": str(e),
                    },
                )
                return self._error_response(str(e))

            except Exception as e:
                failed_stage = self.stage
                self._advance(UploadStage.RESPONDING)
                logger.error(
                    "Unexpected error during upload",
                    extra={"stage": failed_stage.value, "error": str(e)},
                    exc_info=True,
                )
                return self._error_response(str(e) or UNEXPECTED_ERROR_MESSAGE)

        finally:
            self.storage.release(directory)
            self._advance(UploadStage.CLEANED_UP)
            upload_id_context.reset(token)

    async def _upload(
        self,
        request: Request,
        uploader: AuthenticatedUploader,
        video: StagedFile,
        metadata: VideoMetadata,
    ) -> str:
        """Run the blocking upload in a worker thread, watching for disconnects."""
        observer = self.observer or LoggingProgressObserver(label=metadata.title)
        cancel_event = threading.Event()
        watcher = asyncio.create_task(self._watch_disconnect(request, cancel_event))
        logger.info(
            "Starting video upload",
            extra={"platform": uploader.get_platform_name(), "size_bytes": video.size_bytes},
        )
        try:
            return await run_in_threadpool(uploader.upload, video.path, metadata, observer, cancel_event)
        finally:
            # is_disconnected() runs inside its own cancel scope, which can absorb
            # watcher.cancel(); the event still ends the polling loop.
            cancel_event.set()
            watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await watcher

    async def _watch_disconnect(self, request: Request, cancel_event: threading.Event) -> None:
        while not cancel_event.is_set():
            if await request.is_disconnected():
                logger.warning("Client disconnected during upload, cancelling")
                cancel_event.set()
                return
            await asyncio.sleep(self.poll_interval)

    @staticmethod
    def _error_response(message: str) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=message).model_dump(),
        )
