"""Abstract uploader interface."""

import threading
from abc import ABC, abstractmethod
from pathlib import Path

from shortwave.models.upload import VideoMetadata
from shortwave.uploader.progress import ProgressObserver

UNKNOWN_VIDEO_ID = "unknown"


class AuthenticatedUploader(ABC):
    """Publishes a staged video with an already authenticated platform client."""

    @abstractmethod
    def upload(
        self,
        video_path: Path,
        metadata: VideoMetadata,
        observer: ProgressObserver | None = None,
        cancel_event: threading.Event | None = None,
    ) -> str:
        """Upload a video and return the platform identifier.

        Args:
            video_path: Staged video file
            metadata: Normalized snippet/status metadata
            observer: Optional progress observer
            cancel_event: Set by the caller to abort between chunks

        Returns:
            Platform video id, ``"unknown"`` if the platform omitted it

        Raises:
            UploadError: If the transfer fails, is rejected or is cancelled
        """
        pass

    @abstractmethod
    def get_platform_name(self) -> str:
        """Return platform identifier."""
        pass
