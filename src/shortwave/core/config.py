"""Configuration management for ShortWave Launchpad."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    ENV: str = "local"
    SERVICE_NAME: str = "shortwave-launchpad"
    SERVICE_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Upload Constraints
    MAX_UPLOAD_MB: int = 256
    UPLOAD_TEMP_ROOT: str = ""  # Empty = platform temp root
    TEMP_DIR_PREFIX: str = "shortwave-"

    # YouTube Data API
    YOUTUBE_TOKEN_URI: str = "https://oauth2.googleapis.com/token"
    YOUTUBE_UPLOAD_SCOPE: str = "https://www.googleapis.com/auth/youtube.upload"
    UPLOAD_CHUNK_MB: int = 8  # Resumable chunk size, must stay a multiple of 256KB
    UPLOAD_MIME_TYPE: str = "video/*"
    HTTP_TIMEOUT_SECONDS: int = 0  # 0 = httplib2 default
    DISCONNECT_POLL_SECONDS: float = 1.0

    @property
    def max_upload_bytes(self) -> int:
        """Convert MAX_UPLOAD_MB to bytes."""
        return self.MAX_UPLOAD_MB * 1024 * 1024

    @property
    def upload_chunk_bytes(self) -> int:
        """Convert UPLOAD_CHUNK_MB to bytes."""
        return self.UPLOAD_CHUNK_MB * 1024 * 1024

    @property
    def temp_root(self) -> str | None:
        """Directory new temp directories are created under, None for the platform default."""
        return self.UPLOAD_TEMP_ROOT or None


# Singleton settings instance
settings = Settings()
