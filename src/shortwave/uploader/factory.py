"""Uploader factory."""

from typing import Callable

from shortwave.uploader.base import AuthenticatedUploader
from shortwave.uploader.youtube import YouTubeUploader

UploaderFactory = Callable[[object], AuthenticatedUploader]


def create_youtube_uploader(service) -> AuthenticatedUploader:
    """Wrap an authenticated YouTube client in an uploader."""
    return YouTubeUploader(service)


def get_uploader_factory() -> UploaderFactory:
    """FastAPI dependency returning the factory for the production uploader."""
    return create_youtube_uploader
