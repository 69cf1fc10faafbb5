"""Content-Type detection for uploaded objects."""

from __future__ import annotations

import mimetypes

from s3ferry.core.config import DEFAULT_CONTENT_TYPE


def guess_content_type(path: str, default_content_type: str | None = None) -> str:
    """Return the Content-Type for a file.

    Detected from the file extension, else the target's default, else
    DEFAULT_CONTENT_TYPE. Never empty.
    """
    detected, _ = mimetypes.guess_type(path, strict=False)
    return detected or default_content_type or DEFAULT_CONTENT_TYPE
