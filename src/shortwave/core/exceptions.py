"""Exceptions raised along the upload path.

Every one of them is terminal for the request that raised it: the route
turns it into a ``500 {"error": ...}`` response after cleanup has run.
"""


class ShortwaveError(Exception):
    """Base exception for ShortWave Launchpad."""
    pass


class ValidationError(ShortwaveError):
    """Exception raised when a submission is missing required parts."""
    pass


class ConfigurationError(ShortwaveError):
    """Exception raised when required OAuth settings are not configured."""

    def __init__(self, missing_keys: list[str]):
        self.missing_keys = list(missing_keys)
        super().__init__(f"Missing environment variables: {', '.join(self.missing_keys)}")


class PayloadTooLarge(ShortwaveError):
    """Exception raised when the request body exceeds the size limit."""
    pass


class StorageError(ShortwaveError):
    """Exception raised when temporary storage cannot be created."""
    pass


class UploadError(ShortwaveError):
    """Exception raised when the platform call fails or is rejected."""
    pass
