"""Directory upload engine.

This module provides:
- upload_directory: Sync a local directory into a bucket prefix
- plan_upload: Diff a local tree against a remote listing

One pass lists the remote prefix once, walks the local tree, uploads new
or changed files on a bounded worker pool and finally deletes orphaned
remote objects when requested. Unchanged files are detected by comparing
the local MD5 against simple (non-multipart) ETags.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from boto3.s3.transfer import TransferConfig

from s3ferry.core.config import (
    DEFAULT_ACL,
    DEFAULT_MAX_CONCURRENCY,
    S3_MULTIPART_UPLOAD_CONCURRENCY,
    S3_MULTIPART_UPLOAD_PART_SIZE,
    ParamRule,
)
from s3ferry.core.errors import TransferError
from s3ferry.core.params import resolve_params
from s3ferry.core.paths import build_object_key
from s3ferry.core.progress import NullProgress, Progress, ProgressTracker
from s3ferry.core.types import PlannedUpload, RemoteObject, SyncPlan, SyncResult
from s3ferry.storage.delete import delete_objects_by_keys
from s3ferry.storage.listing import list_objects_by_key
from s3ferry.sync.content_type import guess_content_type
from s3ferry.sync.files import iter_local_files
from s3ferry.sync.pool import WorkerPool

logger = logging.getLogger(__name__)


def create_transfer_config() -> TransferConfig:
    """Transfer settings for streaming uploads.

    Files above one part size are sent as multipart uploads, which the
    transfer manager aborts if any part fails.
    """
    return TransferConfig(
        multipart_threshold=S3_MULTIPART_UPLOAD_PART_SIZE,
        multipart_chunksize=S3_MULTIPART_UPLOAD_PART_SIZE,
        max_concurrency=S3_MULTIPART_UPLOAD_CONCURRENCY,
    )


def plan_upload(
    local_dir: Path | str,
    remote: Mapping[str, RemoteObject],
    prefix: str = "",
    params: Sequence[ParamRule] = (),
    stage: str | None = None,
    delete_removed: bool = True,
    log: Any = None,
) -> tuple[SyncPlan, list[str]]:
    """Diff a local tree against a remote listing.

    Files excluded by an OnlyForStage mismatch are not uploaded, but their
    keys still count as local, so their remote objects are never deleted
    as orphans.

    Returns:
        The plan and the keys excluded by stage.
    """
    plan = SyncPlan()
    excluded: list[str] = []
    local_keys: set[str] = set()

    for local_file in iter_local_files(local_dir, log):
        key = build_object_key(prefix, local_file.relative_path)
        local_keys.add(key)

        file_params = resolve_params(local_file.relative_path, params, stage)
        if file_params is None:
            excluded.append(key)
            continue

        plan.uploads.append(
            PlannedUpload(file=local_file, key=key, params=file_params, remote=remote.get(key))
        )

    if delete_removed:
        plan.deletions = sorted(set(remote) - local_keys)

    return plan, excluded


def upload_directory(
    client: Any,
    local_dir: Path | str,
    bucket: str,
    prefix: str = "",
    acl: str = DEFAULT_ACL,
    delete_removed: bool = True,
    default_content_type: str | None = None,
    params: Sequence[ParamRule] = (),
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    stage: str | None = None,
    progress: Progress | None = None,
    log: Any = None,
) -> SyncResult:
    """Sync a local directory into a bucket prefix.

    Args:
        client: boto3 S3 client.
        local_dir: Local sync root.
        bucket: Resolved bucket name.
        prefix: Normalized key prefix ("" or ending with "/").
        acl: Canned ACL for uploaded objects.
        delete_removed: Delete remote objects with no local counterpart.
        default_content_type: Fallback when the extension is unknown.
        params: Ordered param rules.
        max_concurrency: Maximum files hashed or uploaded at once.
        stage: Active stage for OnlyForStage rules.
        progress: Progress sink for percentage updates.
        log: Logger-like object for enumeration warnings and errors.

    Returns:
        What the pass uploaded, skipped, deleted and excluded.

    Raises:
        TransferError: If any file failed; raised after every scheduled
            upload finished. Orphans are not deleted in that case.
        DeleteObjectsError: If the delete phase reported failures.
    """
    progress = progress or NullProgress()
    tracker = ProgressTracker(progress, lambda p: f"{local_dir}: sync with bucket {bucket} ({p}%)")

    remote = list_objects_by_key(client, bucket, prefix)
    plan, excluded = plan_upload(local_dir, remote, prefix, params, stage, delete_removed, log)
    total = plan.total_operations
    logger.debug(
        f"{bucket}: {len(plan.uploads)} candidate file(s), "
        f"{len(plan.deletions)} orphan(s), {len(excluded)} excluded by stage"
    )

    transfer_config = create_transfer_config()

    def sync_file(upload: PlannedUpload) -> bool:
        # Hashing and upload share one bounded unit of work
        if upload.is_unchanged():
            return False
        extra_args = {
            "ACL": acl,
            "ContentType": guess_content_type(upload.key, default_content_type),
            **upload.params,
        }
        client.upload_file(
            str(upload.file.path),
            bucket,
            upload.key,
            ExtraArgs=extra_args,
            Config=transfer_config,
        )
        logger.debug(f"Uploaded {upload.file.path} to s3://{bucket}/{upload.key}")
        return True

    pool = WorkerPool(
        max_workers=max_concurrency,
        name=f"upload-{bucket}",
        on_complete=lambda completed: tracker.update(completed, total),
    )
    with pool:
        for upload in plan.uploads:
            pool.submit(upload.key, lambda upload=upload: sync_file(upload))

    outcome = pool.result
    if not outcome.ok:
        for key, error in outcome.failures.items():
            (log or logger).error(f"Failed to upload {key} to {bucket}: {error}")
        raise TransferError(bucket, outcome.failures)

    result = SyncResult(excluded=excluded)
    for upload in plan.uploads:
        if outcome.results.get(upload.key):
            result.uploaded.append(upload.key)
        else:
            result.unchanged.append(upload.key)

    if plan.deletions:
        delete_objects_by_keys(client, bucket, plan.deletions)
        result.deleted = list(plan.deletions)
        tracker.update(total, total)

    logger.info(
        f"{local_dir} -> s3://{bucket}/{prefix}: {len(result.uploaded)} uploaded, "
        f"{len(result.unchanged)} unchanged, {len(result.deleted)} deleted"
    )
    return result
