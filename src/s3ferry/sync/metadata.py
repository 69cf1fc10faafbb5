"""Metadata sync engine.

Re-applies ACL, Content-Type and configured params to objects that were
already uploaded, by copying each object onto itself. Only files matched
by at least one param rule take part. Copies are unconditional: current
remote metadata is not compared first.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from s3ferry.core.config import DEFAULT_ACL, DEFAULT_MAX_CONCURRENCY, ParamRule
from s3ferry.core.errors import TransferError
from s3ferry.core.params import resolve_params
from s3ferry.core.paths import build_object_key
from s3ferry.core.progress import NullProgress, Progress, ProgressTracker
from s3ferry.core.types import MetadataUpdate
from s3ferry.storage.copy import copy_object_with_metadata
from s3ferry.sync.content_type import guess_content_type
from s3ferry.sync.files import iter_local_files
from s3ferry.sync.pool import WorkerPool

logger = logging.getLogger(__name__)


def plan_metadata(
    local_dir: Path | str,
    prefix: str = "",
    params: Sequence[ParamRule] = (),
    stage: str | None = None,
    log: Any = None,
) -> list[MetadataUpdate]:
    """List the files whose metadata must be re-applied."""
    updates: list[MetadataUpdate] = []
    for local_file in iter_local_files(local_dir, log):
        file_params = resolve_params(local_file.relative_path, params, stage, skip_unmatched=True)
        if file_params is None:
            continue
        updates.append(
            MetadataUpdate(
                file=local_file,
                key=build_object_key(prefix, local_file.relative_path),
                params=file_params,
            )
        )
    return updates


def sync_directory_metadata(
    client: Any,
    local_dir: Path | str,
    bucket: str,
    prefix: str = "",
    acl: str = DEFAULT_ACL,
    default_content_type: str | None = None,
    params: Sequence[ParamRule] = (),
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    stage: str | None = None,
    progress: Progress | None = None,
    log: Any = None,
) -> list[str]:
    """Replace the metadata of every uploaded object matched by a param rule.

    Args:
        client: boto3 S3 client.
        local_dir: Local sync root.
        bucket: Resolved bucket name.
        prefix: Normalized key prefix.
        acl: Canned ACL applied by the copy.
        default_content_type: Fallback when the extension is unknown.
        params: Ordered param rules.
        max_concurrency: Maximum copies in flight.
        stage: Active stage for OnlyForStage rules.
        progress: Progress sink for percentage updates.
        log: Logger-like object for enumeration warnings and errors.

    Returns:
        Keys whose metadata was replaced.

    Raises:
        TransferError: If any copy failed; raised after all copies finished.
    """
    progress = progress or NullProgress()

    def build_message(percent: int) -> str:
        return f"{local_dir}: sync bucket metadata to {bucket}/{prefix} ({percent}%)"

    tracker = ProgressTracker(progress, build_message)
    updates = plan_metadata(local_dir, prefix, params, stage, log)
    if not updates:
        progress.update(build_message(0))
        return []

    def copy(update: MetadataUpdate) -> None:
        copy_object_with_metadata(
            client,
            bucket,
            update.key,
            acl,
            content_type=guess_content_type(update.key, default_content_type),
            extra_params=update.params,
        )

    pool = WorkerPool(
        max_workers=max_concurrency,
        name=f"metadata-{bucket}",
        on_complete=lambda completed: tracker.update(completed, len(updates)),
    )
    with pool:
        for update in updates:
            pool.submit(update.key, lambda update=update: copy(update))

    outcome = pool.result
    if not outcome.ok:
        for key, error in outcome.failures.items():
            (log or logger).error(f"Failed to sync metadata of {key} in {bucket}: {error}")
        raise TransferError(bucket, outcome.failures)

    logger.info(f"Synced metadata of {len(updates)} object(s) in s3://{bucket}/{prefix}")
    return [update.key for update in updates]
