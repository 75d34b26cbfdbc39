"""Upload form page."""

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from shortwave.api.v1.routes_credentials import CREDENTIAL_CHECKLIST
from shortwave.core.config import settings
from shortwave.services.upload.metadata import (
    CATEGORY_CHOICES,
    DEFAULT_CATEGORY_ID,
    DEFAULT_TAGS,
    PRIVACY_STATUSES,
)

ui_router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / "ui" / "templates"))


@ui_router.get("/", response_class=HTMLResponse)
async def upload_page(request: Request):
    """Serve the upload UI page."""
    return templates.TemplateResponse(
        request,
        "upload.html",
        {
            "max_upload_mb": settings.MAX_UPLOAD_MB,
            "categories": CATEGORY_CHOICES,
            "default_category_id": DEFAULT_CATEGORY_ID,
            "privacy_statuses": PRIVACY_STATUSES,
            "default_tags": DEFAULT_TAGS,
            "checklist": CREDENTIAL_CHECKLIST,
        },
    )
