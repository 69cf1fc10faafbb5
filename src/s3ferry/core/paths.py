"""Object key helpers."""

from __future__ import annotations

import os
import re

_REPEATED_SLASHES = re.compile(r"/{2,}")


def to_s3_path(os_path: str) -> str:
    """Convert an OS path to a forward-slash object key path.

    Backslashes are always treated as separators, repeated slashes are
    collapsed and leading slashes are removed.
    """
    path = os_path.replace(os.sep, "/").replace("\\", "/")
    return _REPEATED_SLASHES.sub("/", path).lstrip("/")


def build_object_key(prefix: str, relative_path: str) -> str:
    """Return the object key for a file relative to the sync root."""
    return f"{prefix}{to_s3_path(relative_path)}"
