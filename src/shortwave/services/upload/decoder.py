"""Multipart decoding that streams the video part into the request's directory."""

import logging
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Mapping
from uuid import uuid4

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import Headers

from shortwave.core.config import settings
from shortwave.core.exceptions import PayloadTooLarge, ValidationError
from shortwave.models.upload import DecodedSubmission, StagedFile
from shortwave.storage.temp_storage import sanitize_filename

logger = logging.getLogger(__name__)

VIDEO_FIELD = "video"
MAX_FILES = 1
MAX_FIELD_BYTES = 1024 * 1024  # 1MB per text field


def _safe_decode(value: bytes, charset: str = "utf-8") -> str:
    try:
        return value.decode(charset)
    except UnicodeDecodeError:
        return value.decode("latin-1")


class _PartKind:
    FIELD = "field"
    VIDEO = "video"
    SKIPPED = "skipped"


class SubmissionCollector:
    """Receives python-multipart callbacks for one request body.

    Text parts are buffered in memory. Bytes of the ``video`` part are queued
    and written to ``directory`` by ``flush``, so the file never passes
    through a spool outside the request's directory.
    """

    def __init__(self, directory: Path, max_fields: int = 1000, max_field_bytes: int = MAX_FIELD_BYTES):
        self.directory = Path(directory)
        self.max_fields = max_fields
        self.max_field_bytes = max_field_bytes

        self.fields: dict[str, list[str]] = {}
        self.finished = False
        self.missing_filename = False

        self.video_path: Path | None = None
        self.video_filename = ""
        self.video_content_type = "application/octet-stream"
        self.video_size = 0
        self.handle: BinaryIO | None = None
        self.pending: list[bytes] = []

        self._file_count = 0
        self._field_count = 0
        self._headers: dict[bytes, bytes] = {}
        self._header_field = b""
        self._header_value = b""
        self._name = ""
        self._kind = _PartKind.SKIPPED
        self._buffer = bytearray()

    def callbacks(self) -> dict:
        return {
            "on_part_begin": self.on_part_begin,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_headers_finished": self.on_headers_finished,
            "on_end": self.on_end,
        }

    def on_part_begin(self) -> None:
        self._headers = {}
        self._name = ""
        self._kind = _PartKind.SKIPPED
        self._buffer = bytearray()

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def on_header_end(self) -> None:
        self._headers[self._header_field.lower()] = self._header_value
        self._header_field = b""
        self._header_value = b""

    def on_headers_finished(self) -> None:
        _, options = parse_options_header(self._headers.get(b"content-disposition", b""))
        if b"name" not in options:
            raise ValidationError("invalid multipart body: part is missing a field name")
        self._name = _safe_decode(options[b"name"])

        if b"filename" not in options:
            self._field_count += 1
            if self._field_count > self.max_fields:
                raise ValidationError(
                    f"invalid multipart body: too many fields, maximum is {self.max_fields}"
                )
            self._kind = _PartKind.FIELD
            return

        self._file_count += 1
        if self._file_count > MAX_FILES:
            raise ValidationError(f"invalid multipart body: too many files, maximum is {MAX_FILES}")

        filename = _safe_decode(options[b"filename"])
        if self._name != VIDEO_FIELD:
            return
        if not filename:
            self.missing_filename = True
            return

        content_type = self._headers.get(b"content-type", b"").decode("latin-1")
        self.video_path = self.directory / f"{uuid4()}_{sanitize_filename(filename)}"
        self.video_filename = filename
        self.video_content_type = content_type or "application/octet-stream"
        self.handle = open(self.video_path, "wb")
        self._kind = _PartKind.VIDEO

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        if self._kind == _PartKind.VIDEO:
            self.pending.append(data[start:end])
            self.video_size += end - start
        elif self._kind == _PartKind.FIELD:
            self._buffer.extend(data[start:end])
            if len(self._buffer) > self.max_field_bytes:
                raise ValidationError(f"invalid multipart body: field '{self._name}' is too large")

    def on_part_end(self) -> None:
        if self._kind == _PartKind.FIELD:
            self.fields.setdefault(self._name, []).append(_safe_decode(bytes(self._buffer)))

    def on_end(self) -> None:
        self.finished = True

    async def flush(self) -> None:
        """Write queued video bytes to the staged file."""
        if not self.pending:
            return
        data = b"".join(self.pending)
        self.pending.clear()
        if self.handle is not None:
            await run_in_threadpool(self.handle.write, data)

    def close(self) -> None:
        if self.handle is not None:
            self.handle.close()
            self.handle = None

    def discard(self) -> None:
        """Close and delete a partially written video."""
        self.close()
        self.pending.clear()
        if self.video_path is not None:
            self.video_path.unlink(missing_ok=True)

    def staged_video(self) -> StagedFile:
        if self.video_path is None:
            if self.missing_filename:
                raise ValidationError("missing filename metadata")
            raise ValidationError("no video file provided")
        return StagedFile(
            path=self.video_path,
            original_filename=self.video_filename,
            size_bytes=self.video_size,
            content_type=self.video_content_type,
        )


class MultipartDecoder:
    """Parses one multipart submission and stages its video part on disk."""

    def __init__(self, max_bytes: int | None = None, max_fields: int = 1000):
        self.max_bytes = max_bytes if max_bytes is not None else settings.max_upload_bytes
        self.max_fields = max_fields

    @property
    def limit_message(self) -> str:
        return f"Upload exceeds maximum size of {self.max_bytes // (1024 * 1024)}MB"

    async def decode(
        self,
        headers: Mapping[str, str],
        stream: AsyncIterator[bytes],
        directory: Path,
    ) -> DecodedSubmission:
        """Decode a multipart body into form fields and a staged video.

        Args:
            headers: Request headers (content type and length are used)
            stream: Raw request body chunks
            directory: Temp directory the video is written into

        Returns:
            The text fields (every value kept as a list) and the staged file

        Raises:
            PayloadTooLarge: If the body exceeds the size limit
            ValidationError: If the body is malformed or lacks the video part
        """
        headers = Headers(headers=dict(headers))
        self._check_declared_length(headers)

        content_type, params = parse_options_header(headers.get("content-type", ""))
        if content_type != b"multipart/form-data":
            raise ValidationError("expected a multipart/form-data body")
        boundary = params.get(b"boundary")
        if not boundary:
            raise ValidationError("invalid multipart body: missing boundary")

        collector = SubmissionCollector(directory, max_fields=self.max_fields)
        parser = MultipartParser(boundary, collector.callbacks())
        try:
            async for chunk in self._bounded(stream):
                parser.write(chunk)
                await collector.flush()
            parser.finalize()
            await collector.flush()
            if not collector.finished:
                raise ValidationError("invalid multipart body: unexpected end of body")
            video = collector.staged_video()
        except MultipartParseError as e:
            collector.discard()
            raise ValidationError(f"invalid multipart body: {e}") from e
        except Exception:
            collector.discard()
            raise
        finally:
            collector.close()

        logger.info(
            "Multipart submission decoded",
            extra={
                "original_filename": video.original_filename,
                "size_bytes": video.size_bytes,
                "field_names": sorted(collector.fields),
            },
        )
        return DecodedSubmission(fields=collector.fields, video=video)

    def _check_declared_length(self, headers: Headers) -> None:
        declared = headers.get("content-length")
        if declared is None:
            return
        try:
            declared_bytes = int(declared)
        except ValueError:
            raise ValidationError("invalid Content-Length header")
        if declared_bytes > self.max_bytes:
            raise PayloadTooLarge(self.limit_message)

    async def _bounded(self, stream: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
        received = 0
        async for chunk in stream:
            received += len(chunk)
            if received > self.max_bytes:
                logger.warning(
                    "Upload body exceeds size limit",
                    extra={"received_bytes": received, "max_bytes": self.max_bytes},
                )
                raise PayloadTooLarge(self.limit_message)
            yield chunk
