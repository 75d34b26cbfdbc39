"""OAuth client configuration and construction of the authenticated YouTube client."""

import logging

import google_auth_httplib2
import httplib2
from fastapi import Depends
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from pydantic_settings import BaseSettings, SettingsConfigDict

from shortwave.core.config import settings
from shortwave.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

REQUIRED_KEYS = (
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "GOOGLE_REDIRECT_URI",
    "YOUTUBE_REFRESH_TOKEN",
)


class OAuthClientConfig(BaseSettings):
    """OAuth secrets for the YouTube channel, read from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = ""
    YOUTUBE_REFRESH_TOKEN: str = ""

    def missing_keys(self) -> list[str]:
        """Names of every required key that is unset or blank."""
        return [key for key in REQUIRED_KEYS if not getattr(self, key).strip()]

    def key_status(self) -> dict[str, bool]:
        """Whether each required key is configured, without exposing values."""
        missing = set(self.missing_keys())
        return {key: key not in missing for key in REQUIRED_KEYS}


class CredentialResolver:
    """Builds an authenticated YouTube client from injected OAuth settings.

    Nothing is cached: each call produces a client owned by the caller. The
    long-lived refresh token is exchanged for a bearer token by google-auth
    the first time the client makes a request.
    """

    def __init__(
        self,
        config: OAuthClientConfig,
        token_uri: str | None = None,
        scopes: list[str] | None = None,
        timeout: int | None = None,
    ):
        self.config = config
        self.token_uri = token_uri or settings.YOUTUBE_TOKEN_URI
        self.scopes = scopes or [settings.YOUTUBE_UPLOAD_SCOPE]
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS

    def validate(self) -> None:
        """Raise ConfigurationError naming every missing key."""
        missing = self.config.missing_keys()
        if missing:
            logger.error(
                "OAuth configuration incomplete",
                extra={"missing_keys": missing},
            )
            raise ConfigurationError(missing)

    def build_credentials(self) -> Credentials:
        """Create OAuth2 credentials seeded with the refresh token."""
        self.validate()
        return Credentials(
            token=None,
            refresh_token=self.config.YOUTUBE_REFRESH_TOKEN,
            token_uri=self.token_uri,
            client_id=self.config.GOOGLE_CLIENT_ID,
            client_secret=self.config.GOOGLE_CLIENT_SECRET,
            scopes=self.scopes,
        )

    def resolve(self):
        """Return an authenticated YouTube Data API v3 client.

        Raises:
            ConfigurationError: If any required OAuth setting is missing
        """
        credentials = self.build_credentials()

        if self.timeout:
            authorized_http = google_auth_httplib2.AuthorizedHttp(
                credentials, http=httplib2.Http(timeout=self.timeout)
            )
            service = build("youtube", "v3", http=authorized_http, cache_discovery=False)
        else:
            service = build("youtube", "v3", credentials=credentials, cache_discovery=False)

        logger.debug(
            "YouTube client created",
            extra={"redirect_uri": self.config.GOOGLE_REDIRECT_URI, "scopes": self.scopes},
        )
        return service


def get_oauth_config() -> OAuthClientConfig:
    """Read the OAuth secrets for the current request."""
    return OAuthClientConfig()


def get_credential_resolver(
    config: OAuthClientConfig = Depends(get_oauth_config),
) -> CredentialResolver:
    """FastAPI dependency providing a resolver bound to fresh OAuth settings."""
    return CredentialResolver(config)
