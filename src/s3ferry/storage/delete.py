"""Batched object deletion.

Batches are sent strictly one after another; a batch with per-object
failures stops the run with a DeleteObjectsError naming the failed keys.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from s3ferry.core.config import S3_DELETE_BATCH_SIZE
from s3ferry.core.errors import DeleteObjectsError
from s3ferry.core.progress import NullProgress, Progress
from s3ferry.storage.listing import iter_objects

logger = logging.getLogger(__name__)


def delete_batch(client: Any, bucket: str, keys: Sequence[str]) -> None:
    """Delete up to S3_DELETE_BATCH_SIZE keys in a single request.

    Raises:
        ValueError: If more keys than one request allows are given.
        DeleteObjectsError: If the store reports per-object failures.
    """
    if len(keys) > S3_DELETE_BATCH_SIZE:
        raise ValueError(f"A delete batch holds at most {S3_DELETE_BATCH_SIZE} keys, got {len(keys)}")
    if not keys:
        return

    response = client.delete_objects(
        Bucket=bucket,
        Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
    )
    errors = response.get("Errors") or []
    if errors:
        for error in errors:
            logger.error(
                f"Failed to delete s3://{bucket}/{error.get('Key')}: "
                f"{error.get('Code')} {error.get('Message')}"
            )
        raise DeleteObjectsError(bucket, [error.get("Key", "?") for error in errors])


def delete_objects_by_keys(
    client: Any,
    bucket: str,
    keys: Sequence[str],
    on_batch: Callable[[int, int], None] | None = None,
) -> None:
    """Delete keys in batches of at most 1000.

    Args:
        client: boto3 S3 client.
        bucket: Bucket name.
        keys: Keys to delete.
        on_batch: Called with (deleted_so_far, total) after each batch.
    """
    deleted = 0
    for start in range(0, len(keys), S3_DELETE_BATCH_SIZE):
        batch = keys[start : start + S3_DELETE_BATCH_SIZE]
        delete_batch(client, bucket, batch)
        deleted += len(batch)
        logger.debug(f"Deleted {deleted}/{len(keys)} object(s) from {bucket}")
        if on_batch:
            on_batch(deleted, len(keys))


def delete_directory(
    client: Any,
    bucket: str,
    prefix: str,
    progress: Progress | None = None,
) -> int:
    """Delete every object under a prefix.

    Objects are deleted while the listing is still being read, so the
    reported percentage is relative to the objects discovered so far.

    Returns:
        Number of deleted objects.
    """
    progress = progress or NullProgress()
    batch: list[str] = []
    discovered = 0
    deleted = 0

    def report() -> None:
        percent = 100 if discovered == 0 else deleted * 100 // discovered
        progress.update(
            f"{bucket}: removing files with prefix {prefix} "
            f"({deleted} objects removed, {percent}%)"
        )

    for obj in iter_objects(client, bucket, prefix):
        discovered += 1
        batch.append(obj.key)
        if len(batch) >= S3_DELETE_BATCH_SIZE:
            delete_batch(client, bucket, batch)
            deleted += len(batch)
            batch = []
            report()

    if batch:
        delete_batch(client, bucket, batch)
        deleted += len(batch)

    progress.update(f"{bucket}: removing files with prefix {prefix} (100%)")
    logger.info(f"Removed {deleted} object(s) from s3://{bucket}/{prefix}")
    return deleted
