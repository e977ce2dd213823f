from __future__ import annotations

import uuid

INSPECTION_PREFIX = "insp_"
IMAGE_PREFIX = "img_"
REPORT_PREFIX = "report_"


def _short_uuid() -> str:
    # First 8 hex chars of a random UUID, e.g. "3f2a9c1d"
    return uuid.uuid4().hex[:8]


def new_inspection_id() -> str:
    return f"{INSPECTION_PREFIX}{_short_uuid()}"


def new_image_id() -> str:
    return f"{IMAGE_PREFIX}{_short_uuid()}"


def report_id_for(inspection_id: str) -> str:
    """Reports are never stored on their own, so their id is derived from the inspection."""
    return f"{REPORT_PREFIX}{inspection_id}"
