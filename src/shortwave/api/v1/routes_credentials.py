"""Credential checklist routes."""

from fastapi import APIRouter, Depends

from shortwave.auth.credentials import OAuthClientConfig, get_oauth_config
from shortwave.models.upload import CredentialStatusResponse

router = APIRouter(prefix="/api/credentials", tags=["credentials"])

CREDENTIAL_CHECKLIST = [
    "Create a Google Cloud project with the YouTube Data API v3 enabled.",
    "Configure an OAuth client with type Web Application to obtain the client ID and secret.",
    "Add https://developers.google.com/oauthplayground as an authorized redirect URI to use the OAuth playground.",
    "Exchange authorization code for refresh token using the YouTube upload scope.",
    "Set GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REDIRECT_URI, and YOUTUBE_REFRESH_TOKEN as environment variables.",
]


@router.get("/status", response_model=CredentialStatusResponse)
async def credential_status(
    config: OAuthClientConfig = Depends(get_oauth_config),
) -> CredentialStatusResponse:
    """Report which OAuth settings are configured. Values are never returned."""
    keys = config.key_status()
    return CredentialStatusResponse(configured=all(keys.values()), keys=keys)
