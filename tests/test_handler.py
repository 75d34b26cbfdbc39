"""Tests for the upload request lifecycle."""

import asyncio
import json
import logging
import threading
from pathlib import Path

import pytest
from conftest import FakeUploader, RecordingObserver
from starlette.requests import Request

from shortwave.core.exceptions import UploadError, ValidationError
from shortwave.models.upload import StagedFile
from shortwave.services.upload.handler import (
    UploadRequestHandler,
    UploadStage,
    ensure_uploadable,
)
from shortwave.storage.temp_storage import TempStorageManager


class DisconnectingRequest:
    """Request stand-in reporting a disconnect after a number of polls."""

    def __init__(self, connected_polls: int = 0):
        self.connected_polls = connected_polls
        self.polls = 0

    async def is_disconnected(self) -> bool:
        self.polls += 1
        return self.polls > self.connected_polls


def test_ensure_uploadable_accepts_non_empty_file(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"video")

    ensure_uploadable(StagedFile(path=path, original_filename="clip.mp4", size_bytes=5))


def test_ensure_uploadable_rejects_empty_file(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"")

    with pytest.raises(ValidationError, match="empty"):
        ensure_uploadable(StagedFile(path=path, original_filename="clip.mp4", size_bytes=0))


def test_ensure_uploadable_rejects_missing_file(tmp_path):
    with pytest.raises(ValidationError):
        ensure_uploadable(
            StagedFile(path=Path(tmp_path / "gone.mp4"), original_filename="gone.mp4", size_bytes=10)
        )


@pytest.mark.asyncio
async def test_watch_disconnect_sets_cancel_event():
    handler = UploadRequestHandler(resolver=None, uploader_factory=None, poll_interval=0.01)
    request = DisconnectingRequest(connected_polls=2)
    cancel_event = threading.Event()

    await asyncio.wait_for(handler._watch_disconnect(request, cancel_event), timeout=1)

    assert cancel_event.is_set()
    assert request.polls == 3


@pytest.mark.asyncio
async def test_watch_disconnect_stops_when_event_set():
    handler = UploadRequestHandler(resolver=None, uploader_factory=None, poll_interval=0.01)
    request = DisconnectingRequest(connected_polls=1000)
    cancel_event = threading.Event()
    cancel_event.set()

    await asyncio.wait_for(handler._watch_disconnect(request, cancel_event), timeout=1)

    assert request.polls == 0


def test_handler_starts_idle():
    handler = UploadRequestHandler(resolver=None, uploader_factory=None)

    assert handler.stage is UploadStage.IDLE


def test_stage_values():
    assert [stage.value for stage in UploadStage] == [
        "idle",
        "decoding",
        "normalizing",
        "authenticating",
        "uploading",
        "responding",
        "cleaned_up",
    ]


BOUNDARY = "handlerboundary"


def multipart_body(video: bytes = b"\x00" * 2048) -> bytes:
    return (
        f"--{BOUNDARY}\r\n"
        'Content-Disposition: form-data; name="title"\r\n\r\n'
        "Lifecycle\r\n"
        f"--{BOUNDARY}\r\n"
        'Content-Disposition: form-data; name="video"; filename="clip.mp4"\r\n'
        "Content-Type: video/mp4\r\n\r\n"
    ).encode() + video + f"\r\n--{BOUNDARY}--\r\n".encode()


def make_request(body: bytes, disconnect_after_body: bool = False) -> Request:
    """Starlette request whose client stays connected unless told otherwise."""
    messages = [{"type": "http.request", "body": body, "more_body": False}]

    async def receive():
        if messages:
            return messages.pop(0)
        if disconnect_after_body:
            return {"type": "http.disconnect"}
        await asyncio.Event().wait()

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/upload",
        "query_string": b"",
        "headers": [
            (b"content-type", f"multipart/form-data; boundary={BOUNDARY}".encode()),
            (b"content-length", str(len(body)).encode()),
        ],
    }
    return Request(scope, receive)


class StaticResolver:
    def resolve(self):
        return "youtube-service"


class WaitForCancelUploader(FakeUploader):
    """Blocks until the handler signals a disconnect."""

    def upload(self, video_path, metadata, observer=None, cancel_event=None):
        self.calls.append({"video_path": Path(video_path), "metadata": metadata})
        if cancel_event.wait(timeout=5):
            raise UploadError("upload cancelled: client disconnected")
        return self.video_id


def make_handler(uploader, root) -> UploadRequestHandler:
    return UploadRequestHandler(
        resolver=StaticResolver(),
        uploader_factory=lambda service: uploader,
        storage=TempStorageManager(root=str(root)),
        observer=RecordingObserver(),
        poll_interval=0,
    )


@pytest.mark.asyncio
async def test_handle_returns_after_fast_upload(tmp_path):
    """The disconnect watcher is torn down once a quick upload returns."""
    for _ in range(25):
        uploader = FakeUploader()
        handler = make_handler(uploader, tmp_path)

        response = await asyncio.wait_for(handler.handle(make_request(multipart_body())), timeout=5)

        assert response.status_code == 200
        assert json.loads(response.body) == {"videoId": "mock-video-id"}
        assert handler.stage is UploadStage.CLEANED_UP
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_handle_client_disconnect_cancels_and_cleans_up(tmp_path):
    uploader = WaitForCancelUploader()
    handler = make_handler(uploader, tmp_path)

    response = await asyncio.wait_for(
        handler.handle(make_request(multipart_body(), disconnect_after_body=True)), timeout=5
    )

    assert response.status_code == 500
    assert json.loads(response.body) == {"error": "upload cancelled: client disconnected"}
    assert len(uploader.calls) == 1
    assert not uploader.calls[0]["video_path"].exists()
    assert list(tmp_path.iterdir()) == []
    assert handler.stage is UploadStage.CLEANED_UP


@pytest.mark.asyncio
async def test_handle_logs_platform_name(tmp_path, caplog):
    handler = make_handler(FakeUploader(), tmp_path)

    with caplog.at_level(logging.INFO, logger="shortwave.services.upload.handler"):
        await asyncio.wait_for(handler.handle(make_request(multipart_body())), timeout=5)

    started = [record for record in caplog.records if record.getMessage() == "Starting video upload"]
    assert len(started) == 1
    assert started[0].platform == "fake"
