"""Normalization of raw form fields into upload metadata.

Form values arrive absent, as a single string, or as a list when the field
was repeated. None of these functions fail: anything unusable falls back to
the documented default.
"""

from typing import Mapping, Sequence, Union

from shortwave.models.upload import VideoMetadata

RawValue = Union[str, Sequence[str], None]

DEFAULT_TITLE = "Untitled Shorts Upload"
DEFAULT_PRIVACY_STATUS = "public"
DEFAULT_CATEGORY_ID = "22"  # People & Blogs

PRIVACY_STATUSES = ("public", "unlisted", "private")

# YouTube video categories offered by the upload form
CATEGORY_CHOICES = {
    "1": "Film & Animation",
    "2": "Autos & Vehicles",
    "10": "Music",
    "15": "Pets & Animals",
    "17": "Sports",
    "19": "Travel & Events",
    "20": "Gaming",
    "22": "People & Blogs",
    "23": "Comedy",
    "24": "Entertainment",
    "25": "News & Politics",
    "26": "Howto & Style",
    "27": "Education",
    "28": "Science & Technology",
}

DEFAULT_TAGS = ["Shorts", "YouTubeShorts", "VerticalVideo"]


def coerce_field(value: RawValue) -> str:
    """Return the first value of a possibly repeated field, or an empty string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if len(value) == 0:
        return ""
    return coerce_field(value[0])


def coerce_boolean(value: RawValue) -> bool:
    """Only the literal string ``"true"`` is true."""
    return coerce_field(value) == "true"


def extract_tags(fields: Mapping[str, RawValue]) -> list[str]:
    """Collect tags from ``tags[]`` or ``tags``.

    Entries are trimmed and empty ones dropped. Order is preserved and
    duplicates are kept.
    """
    raw = fields.get("tags[]")
    if raw is None:
        raw = fields.get("tags")
    if raw is None:
        return []

    if isinstance(raw, str):
        entries = [raw]
    else:
        entries = []
        for entry in raw:
            if isinstance(entry, str):
                entries.append(entry)
            else:
                entries.extend(entry)

    tags = []
    for entry in entries:
        tag = f"{entry}".strip()
        if tag:
            tags.append(tag)
    return tags


def normalize_metadata(fields: Mapping[str, RawValue]) -> VideoMetadata:
    """Build upload metadata from the raw form field mapping."""
    return VideoMetadata(
        title=coerce_field(fields.get("title")) or DEFAULT_TITLE,
        description=coerce_field(fields.get("description")),
        tags=extract_tags(fields),
        privacy_status=coerce_field(fields.get("privacyStatus")) or DEFAULT_PRIVACY_STATUS,
        category_id=coerce_field(fields.get("categoryId")) or DEFAULT_CATEGORY_ID,
        # TODO: require an explicit audience choice instead of defaulting to not made for kids
        made_for_kids=coerce_boolean(fields.get("madeForKids")),
        notify_subscribers=coerce_boolean(fields.get("notifySubscribers")),
    )
