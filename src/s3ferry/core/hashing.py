"""Content fingerprints comparable with S3 entity tags."""

import hashlib
from pathlib import Path

HASH_BLOCK_SIZE = 1024 * 1024  # 1 MiB


def compute_file_md5(path: Path | str) -> str:
    """Compute the MD5 of a file in the quoted form S3 uses for ETags.

    Reads the file in blocks so memory use does not grow with file size.

    Args:
        path: Path to the file to hash.

    Returns:
        The hex digest wrapped in double quotes, e.g. ``'"d41d8cd9..."'``.

    Raises:
        OSError: If the file cannot be read.
    """
    hasher = hashlib.md5(usedforsecurity=False)
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(HASH_BLOCK_SIZE), b""):
            hasher.update(block)
    return f'"{hasher.hexdigest()}"'


def is_multipart_etag(etag: str | None) -> bool:
    """Check whether an ETag belongs to a multipart-assembled object.

    Multipart ETags have the form ``"<hex>-<part count>"`` and are not a
    hash of the object content.
    """
    return bool(etag) and "-" in etag
