"""Observers notified while a video is being transferred."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class ProgressObserver(Protocol):
    """Receives transfer progress from an uploader."""

    def on_progress(self, bytes_sent: int, total_bytes: int) -> None:
        ...

    def on_complete(self) -> None:
        ...


class LoggingProgressObserver:
    """Default observer: logs progress and the completion of the transfer."""

    def __init__(self, label: str = ""):
        self.label = label
        self.last_percent = -1

    def on_progress(self, bytes_sent: int, total_bytes: int) -> None:
        percent = int(bytes_sent * 100 / total_bytes) if total_bytes else 100
        if percent == self.last_percent:
            return
        self.last_percent = percent
        logger.debug(
            "Upload progress",
            extra={"video": self.label, "percent": percent, "bytes_sent": bytes_sent},
        )

    def on_complete(self) -> None:
        logger.info("Video upload completed", extra={"video": self.label})
