"""Paginated bucket listing."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from s3ferry.core.types import RemoteObject

logger = logging.getLogger(__name__)


def iter_objects(client: Any, bucket: str, prefix: str = "") -> Iterator[RemoteObject]:
    """Yield every object under a prefix, one page at a time.

    Follows continuation tokens until the store reports no further pages.
    Entries without a key are skipped.

    Args:
        client: boto3 S3 client.
        bucket: Bucket name.
        prefix: Key prefix ("" for the whole bucket).

    Yields:
        RemoteObject for each listed key.
    """
    continuation_token: str | None = None
    pages = 0

    while True:
        kwargs: dict[str, Any] = {"Bucket": bucket, "Prefix": prefix}
        if continuation_token:
            kwargs["ContinuationToken"] = continuation_token

        response = client.list_objects_v2(**kwargs)
        pages += 1

        for entry in response.get("Contents", []):
            key = entry.get("Key")
            if not key:
                continue
            yield RemoteObject(key=key, etag=entry.get("ETag"), size=entry.get("Size"))

        continuation_token = (
            response.get("NextContinuationToken") if response.get("IsTruncated") else None
        )
        if not continuation_token:
            break

    logger.debug(f"Listed s3://{bucket}/{prefix} in {pages} page(s)")


def list_objects_by_key(client: Any, bucket: str, prefix: str = "") -> dict[str, RemoteObject]:
    """Materialize a listing as a key -> RemoteObject map."""
    return {obj.key: obj for obj in iter_objects(client, bucket, prefix)}
