"""Per-target orchestration of sync passes.

This module provides:
- SyncOrchestrator: Runs the upload, metadata, tag and clear operations
  for every configured bucket target

Each target runs on its own worker thread. A failing target (bad config,
unresolvable bucket, failed pre-command, store error) never stops its
siblings; failures are collected and raised together as
TargetsFailedError once every target finished.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

from s3ferry.core.config import (
    DEFAULT_PRE_COMMAND_TIMEOUT,
    FerryOptions,
    SyncTarget,
    parse_bucket_config,
)
from s3ferry.core.errors import ConfigValidationError, PreCommandError, TargetsFailedError
from s3ferry.core.progress import NullProgressFactory, Progress, ProgressFactory
from s3ferry.storage.delete import delete_directory
from s3ferry.storage.tags import update_bucket_tags
from s3ferry.sync.metadata import sync_directory_metadata
from s3ferry.sync.pool import WorkerPool
from s3ferry.sync.upload import upload_directory

logger = logging.getLogger(__name__)

TargetOperation = Callable[[SyncTarget, str, Progress], None]


def run_pre_command(
    command: str,
    cwd: Path,
    timeout: float = DEFAULT_PRE_COMMAND_TIMEOUT,
) -> None:
    """Run a target's pre-command through the shell.

    Raises:
        PreCommandError: If the command exits non-zero, times out or
            cannot be started.
    """
    logger.info(f"Running pre-command: {command}")
    try:
        completed = subprocess.run(
            command,
            shell=True,
            cwd=cwd,
            timeout=timeout,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.TimeoutExpired as e:
        raise PreCommandError(command, f"timed out after {timeout:g}s") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        reason = f"exit status {e.returncode}"
        raise PreCommandError(command, f"{reason}: {stderr}" if stderr else reason) from e
    except OSError as e:
        raise PreCommandError(command, str(e)) from e

    if completed.stdout:
        logger.debug(completed.stdout.rstrip())


class SyncOrchestrator:
    """Run sync operations for a list of raw bucket entries.

    Usage:
        orchestrator = SyncOrchestrator(s3_client, options, get_bucket_name=resolve)
        orchestrator.full_sync(config.buckets, invoked_as_command=True)
    """

    def __init__(
        self,
        s3_client: Any,
        options: FerryOptions | None = None,
        progress_factory: ProgressFactory | None = None,
        get_bucket_name: Callable[[str], str] | None = None,
        log: Any = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            s3_client: boto3 S3 client shared by all targets.
            options: Invocation options.
            progress_factory: Creates one progress entry per target.
            get_bucket_name: Resolves a bucketNameKey to a bucket name.
            log: Logger-like object handed to the engines.
        """
        self._client = s3_client
        self._options = options or FerryOptions()
        self._progress_factory = progress_factory or NullProgressFactory()
        self._get_bucket_name = get_bucket_name
        self._log = log or logger

    @property
    def options(self) -> FerryOptions:
        """Invocation options."""
        return self._options

    def resolve_bucket_name(self, target: SyncTarget) -> str:
        """Return the concrete bucket name of a target.

        Raises:
            ConfigValidationError: If only a bucketNameKey is given and no
                resolver is configured.
        """
        if target.bucket_name:
            return target.bucket_name
        if target.bucket_name_key and self._get_bucket_name:
            return self._get_bucket_name(target.bucket_name_key)
        raise ConfigValidationError(
            f"Cannot resolve bucket name for {target.label}: no bucketName and no stack to "
            "resolve bucketNameKey from"
        )

    def local_path(self, target: SyncTarget) -> Path:
        """Absolute local directory of a target."""
        return Path(self._options.service_path) / target.local_dir

    def sync(self, raw_buckets: Sequence[Mapping[str, Any]], invoked_as_command: bool = False) -> None:
        """Upload every target's local directory."""
        ran = self._run_targets(
            raw_buckets,
            "Syncing directories to S3 buckets",
            self._upload,
            run_pre_commands=True,
            invoked_as_command=invoked_as_command,
        )
        if ran:
            self._report_success("Synced files to S3 buckets", invoked_as_command)

    def sync_metadata(
        self, raw_buckets: Sequence[Mapping[str, Any]], invoked_as_command: bool = False
    ) -> None:
        """Re-apply param metadata for every target with param rules."""
        ran = self._run_targets(
            raw_buckets,
            "Syncing bucket metadata",
            self._metadata,
            invoked_as_command=invoked_as_command,
            skip=lambda target: not target.params,
        )
        if ran:
            self._report_success("Synced bucket metadata", invoked_as_command)

    def sync_bucket_tags(
        self, raw_buckets: Sequence[Mapping[str, Any]], invoked_as_command: bool = False
    ) -> None:
        """Merge configured tags into every target bucket with bucketTags."""
        ran = self._run_targets(
            raw_buckets,
            "Updating bucket tags",
            self._tags,
            invoked_as_command=invoked_as_command,
            skip=lambda target: not target.bucket_tags,
        )
        if ran:
            self._report_success("Updated bucket tags", invoked_as_command)

    def clear(self, raw_buckets: Sequence[Mapping[str, Any]], invoked_as_command: bool = False) -> None:
        """Delete every object under each target's prefix."""
        ran = self._run_targets(
            raw_buckets,
            "Removing S3 objects",
            self._clear,
            invoked_as_command=invoked_as_command,
        )
        if ran:
            self._report_success("Removed S3 objects", invoked_as_command)

    def full_sync(
        self, raw_buckets: Sequence[Mapping[str, Any]], invoked_as_command: bool = False
    ) -> None:
        """Upload, then sync metadata, then merge tags, per target."""

        def run_all(target: SyncTarget, bucket: str, progress: Progress) -> None:
            self._upload(target, bucket, progress)
            if target.params:
                self._metadata(target, bucket, progress)
            if target.bucket_tags:
                self._tags(target, bucket, progress)

        ran = self._run_targets(
            raw_buckets,
            "Syncing directories, metadata and tags",
            run_all,
            run_pre_commands=True,
            invoked_as_command=invoked_as_command,
        )
        if ran:
            self._report_success("Synced files, metadata and tags to S3 buckets", invoked_as_command)

    def _upload(self, target: SyncTarget, bucket: str, progress: Progress) -> None:
        upload_directory(
            self._client,
            self.local_path(target),
            bucket,
            prefix=target.bucket_prefix,
            acl=target.acl,
            delete_removed=target.delete_removed,
            default_content_type=target.default_content_type,
            params=target.params,
            max_concurrency=self._options.max_concurrency,
            stage=self._options.stage,
            progress=progress,
            log=self._log,
        )

    def _metadata(self, target: SyncTarget, bucket: str, progress: Progress) -> None:
        sync_directory_metadata(
            self._client,
            self.local_path(target),
            bucket,
            prefix=target.bucket_prefix,
            acl=target.acl,
            default_content_type=target.default_content_type,
            params=target.params,
            max_concurrency=self._options.max_concurrency,
            stage=self._options.stage,
            progress=progress,
            log=self._log,
        )

    def _tags(self, target: SyncTarget, bucket: str, progress: Progress) -> None:
        progress.update(f"{bucket}: updating bucket tags")
        update_bucket_tags(self._client, bucket, target.bucket_tags or {})

    def _clear(self, target: SyncTarget, bucket: str, progress: Progress) -> None:
        delete_directory(self._client, bucket, target.bucket_prefix, progress)

    def _run_targets(
        self,
        raw_buckets: Sequence[Mapping[str, Any]],
        description: str,
        operation: TargetOperation,
        run_pre_commands: bool = False,
        invoked_as_command: bool = False,
        skip: Callable[[SyncTarget], bool] | None = None,
    ) -> bool:
        """Run an operation for every target and collect failures.

        Returns:
            False if there were no targets at all.

        Raises:
            TargetsFailedError: If at least one target failed.
        """
        if not raw_buckets:
            return False

        level = logging.INFO if invoked_as_command else logging.DEBUG
        logger.log(level, f"{description}...")

        def run_target(raw: Mapping[str, Any]) -> bool:
            target = parse_bucket_config(raw)
            if not target.enabled:
                logger.debug(f"Skipping disabled target {target.label}")
                return False
            if skip and skip(target):
                return False

            bucket = self.resolve_bucket_name(target)
            if self._options.bucket and bucket != self._options.bucket:
                logger.debug(f"Skipping {bucket}: not the requested bucket {self._options.bucket}")
                return False

            if run_pre_commands and target.pre_command:
                run_pre_command(target.pre_command, Path(self._options.service_path))

            progress = self._progress_factory.create(f"{self.local_path(target)}: {description}")
            try:
                operation(target, bucket, progress)
            finally:
                progress.remove()
            return True

        pool = WorkerPool(max_workers=len(raw_buckets), name="target")
        with pool:
            for index, raw in enumerate(raw_buckets):
                pool.submit(_target_name(raw, index), lambda raw=raw: run_target(raw))

        outcome = pool.result
        if not outcome.ok:
            for name, error in outcome.failures.items():
                self._log.error(f"{name}: {error}")
            raise TargetsFailedError(outcome.failures)
        return True

    def _report_success(self, message: str, invoked_as_command: bool) -> None:
        logger.log(logging.INFO if invoked_as_command else logging.DEBUG, message)


def _target_name(raw: Any, index: int) -> str:
    if isinstance(raw, Mapping):
        name = raw.get("bucketName") or raw.get("bucketNameKey") or raw.get("localDir")
        if name:
            return f"#{index} {name}"
    return f"#{index}"
