"""
Upload Service

Receives a multipart Shorts submission, stages the video in a per-request
temp directory, normalizes its metadata and publishes it to YouTube.
"""

from shortwave.services.upload.decoder import MultipartDecoder
from shortwave.services.upload.handler import UploadRequestHandler, UploadStage
from shortwave.services.upload.metadata import normalize_metadata

__all__ = [
    "MultipartDecoder",
    "UploadRequestHandler",
    "UploadStage",
    "normalize_metadata",
]
