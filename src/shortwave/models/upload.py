"""Upload data models."""

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Response model for a published video."""

    videoId: str


class ErrorResponse(BaseModel):
    """Response model for any failed request."""

    error: str


class CredentialStatusResponse(BaseModel):
    """Response model for the credential checklist."""

    configured: bool
    keys: dict[str, bool]


@dataclass
class StagedFile:
    """Video payload written to the request's temp directory."""

    path: Path
    original_filename: str
    size_bytes: int
    content_type: str = "application/octet-stream"


@dataclass
class DecodedSubmission:
    """Form fields and the staged video of one multipart request."""

    fields: dict[str, list[str]]
    video: StagedFile


@dataclass
class VideoMetadata:
    """Normalized metadata sent along with the video."""

    title: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    privacy_status: str = "public"
    category_id: str = "22"
    made_for_kids: bool = False
    notify_subscribers: bool = False

    def to_resource_body(self) -> dict:
        """Build the snippet/status body of a ``videos.insert`` call."""
        return {
            "snippet": {
                "title": self.title,
                "description": self.description,
                "tags": list(self.tags),
                "categoryId": self.category_id,
            },
            "status": {
                "privacyStatus": self.privacy_status,
                "selfDeclaredMadeForKids": self.made_for_kids,
            },
        }
