"""Pytest configuration and shared fixtures."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from shortwave.api.v1.routes_upload import get_progress_observer
from shortwave.auth.credentials import OAuthClientConfig, get_oauth_config
from shortwave.core.config import settings
from shortwave.main import app
from shortwave.uploader.base import AuthenticatedUploader
from shortwave.uploader.factory import get_uploader_factory


class FakeUploader(AuthenticatedUploader):
    """Records every upload call and returns a scripted id or error."""

    def __init__(self, video_id: str = "mock-video-id", error: Exception | None = None):
        self.video_id = video_id
        self.error = error
        self.calls = []
        self.services = []

    def upload(self, video_path, metadata, observer=None, cancel_event=None):
        path = Path(video_path)
        size = path.stat().st_size
        self.calls.append(
            {
                "video_path": path,
                "size_bytes": size,
                "content": path.read_bytes(),
                "metadata": metadata,
            }
        )
        if self.error is not None:
            raise self.error
        if observer is not None:
            observer.on_progress(size // 2, size)
            observer.on_progress(size, size)
            observer.on_complete()
        return self.video_id

    def get_platform_name(self) -> str:
        return "fake"


class RecordingObserver:
    """Progress observer that keeps every notification."""

    def __init__(self):
        self.events = []

    def on_progress(self, bytes_sent: int, total_bytes: int) -> None:
        self.events.append(("progress", bytes_sent, total_bytes))

    def on_complete(self) -> None:
        self.events.append(("complete",))


@pytest.fixture
def temp_root(tmp_path, monkeypatch):
    """Point per-request temp directories at an inspectable location."""
    root = tmp_path / "uploads"
    root.mkdir()
    monkeypatch.setattr(settings, "UPLOAD_TEMP_ROOT", str(root))
    return root


@pytest.fixture
def oauth_config():
    """Fully configured OAuth settings."""
    return OAuthClientConfig(
        GOOGLE_CLIENT_ID="client-id.apps.googleusercontent.com",
        GOOGLE_CLIENT_SECRET="client-secret",
        GOOGLE_REDIRECT_URI="https://developers.google.com/oauthplayground",
        YOUTUBE_REFRESH_TOKEN="1//refresh-token",
    )


@pytest.fixture
def fake_uploader():
    return FakeUploader()


@pytest.fixture
def recording_observer():
    return RecordingObserver()


@pytest.fixture
def mock_build():
    """Mock the discovery client builder so no discovery document is loaded."""
    with patch("shortwave.auth.credentials.build") as mock:
        mock.return_value = MagicMock(name="youtube-service")
        yield mock


@pytest.fixture
def client(temp_root, oauth_config, fake_uploader, recording_observer, mock_build):
    """Test client wired to the fake uploader and fixture credentials."""

    def uploader_factory(service):
        fake_uploader.services.append(service)
        return fake_uploader

    app.dependency_overrides[get_oauth_config] = lambda: oauth_config
    app.dependency_overrides[get_uploader_factory] = lambda: uploader_factory
    app.dependency_overrides[get_progress_observer] = lambda: recording_observer
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
