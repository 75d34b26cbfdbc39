"""YouTube Data API v3 uploader."""

import logging
import threading
from pathlib import Path

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload

from shortwave.core.config import settings
from shortwave.core.exceptions import UploadError
from shortwave.models.upload import VideoMetadata
from shortwave.uploader.base import UNKNOWN_VIDEO_ID, AuthenticatedUploader
from shortwave.uploader.progress import LoggingProgressObserver, ProgressObserver

logger = logging.getLogger(__name__)


class YouTubeUploader(AuthenticatedUploader):
    """Uploads videos through ``videos.insert`` with a resumable media body.

    The transfer is a single attempt: chunks are sent without retries and the
    first failure ends the upload.
    """

    def __init__(self, service, chunk_size: int | None = None, mime_type: str | None = None):
        self.service = service
        self.chunk_size = chunk_size or settings.upload_chunk_bytes
        self.mime_type = mime_type or settings.UPLOAD_MIME_TYPE

    def upload(
        self,
        video_path: Path,
        metadata: VideoMetadata,
        observer: ProgressObserver | None = None,
        cancel_event: threading.Event | None = None,
    ) -> str:
        observer = observer or LoggingProgressObserver(label=metadata.title)
        body = metadata.to_resource_body()

        logger.info(
            "Uploading video to YouTube",
            extra={
                "title": metadata.title,
                "privacy_status": metadata.privacy_status,
                "category_id": metadata.category_id,
                "tag_count": len(metadata.tags),
                "notify_subscribers": metadata.notify_subscribers,
            },
        )

        try:
            media = MediaFileUpload(
                str(video_path),
                mimetype=self.mime_type,
                chunksize=self.chunk_size,
                resumable=True,
            )
            request = self.service.videos().insert(
                part=",".join(body.keys()),
                body=body,
                media_body=media,
                notifySubscribers=metadata.notify_subscribers,
            )

            response = None
            while response is None:
                if cancel_event is not None and cancel_event.is_set():
                    raise UploadError("upload cancelled: client disconnected")
                status, response = request.next_chunk(num_retries=0)
                if status:
                    observer.on_progress(status.resumable_progress, status.total_size)

        except UploadError:
            logger.warning("YouTube upload cancelled", extra={"title": metadata.title})
            raise
        except HttpError as e:
            reason = getattr(e, "reason", None) or str(e)
            logger.error(
                "YouTube API rejected upload",
                extra={"http_status": e.resp.status, "error": reason},
            )
            raise UploadError(reason) from e
        except GoogleAuthError as e:
            logger.error("YouTube authentication failed", extra={"error": str(e)})
            raise UploadError(f"authentication failed: {e}") from e
        except (httplib2.HttpLib2Error, OSError) as e:
            logger.error("Network error during YouTube upload", extra={"error": str(e)})
            raise UploadError(str(e) or e.__class__.__name__) from e

        total_size = media.size()
        observer.on_progress(total_size, total_size)
        observer.on_complete()

        video_id = (response or {}).get("id") or UNKNOWN_VIDEO_ID
        logger.info(
            "Video published",
            extra={"video_id": video_id, "video_url": f"https://youtube.com/shorts/{video_id}"},
        )
        return video_id

    def get_platform_name(self) -> str:
        return "youtube"
