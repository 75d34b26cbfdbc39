"""Per-request temporary directories for staged uploads."""

import logging
import re
import shutil
import tempfile
from pathlib import Path

from shortwave.core.config import settings
from shortwave.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class TempStorageManager:
    """Creates and removes the temporary directory owned by one request.

    Directories are never shared between requests, so no locking is needed.
    ``release`` never raises: a cleanup failure must not replace the result
    the request already produced.
    """

    def __init__(self, root: str | None = None, prefix: str | None = None):
        self.root = root if root is not None else settings.temp_root
        self.prefix = prefix if prefix is not None else settings.TEMP_DIR_PREFIX

    def acquire(self) -> Path:
        """Create a fresh, uniquely named directory.

        Returns:
            Path of the new directory

        Raises:
            StorageError: If the filesystem denies creation
        """
        try:
            directory = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.root))
        except OSError as e:
            logger.error(
                "Failed to create temp directory",
                extra={"temp_root": self.root or tempfile.gettempdir(), "error": str(e)},
            )
            raise StorageError(f"Failed to create temporary directory: {e}") from e

        logger.debug("Temp directory created", extra={"temp_dir": str(directory)})
        return directory

    def release(self, directory: Path | str | None) -> None:
        """Recursively remove a directory acquired by this manager."""
        if directory is None:
            return

        try:
            shutil.rmtree(directory)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(
                "Failed to cleanup temp directory",
                extra={"temp_dir": str(directory), "error": str(e)},
            )
        else:
            logger.debug("Temp directory removed", extra={"temp_dir": str(directory)})


def sanitize_filename(filename: str) -> str:
    """Remove path traversal and dangerous characters."""
    safe = filename.replace("../", "").replace("..\\", "")
    safe = safe.replace("/", "_").replace("\\", "_")
    safe = re.sub(r"[^a-zA-Z0-9._-]", "_", safe)
    # Keep the tail so the extension survives truncation
    return safe[-200:]
