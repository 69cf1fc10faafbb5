"""Exception hierarchy for s3ferry.

This module provides:
- S3FerryError: Base class for every error raised by s3ferry
- ConfigValidationError: Invalid or incomplete bucket configuration
- StackOutputError: Bucket name could not be resolved from a stack output
- S3OperationError: A store operation failed after client retries
- DeleteObjectsError, TransferError: Aggregate store failures
- PreCommandError: A target's pre-command failed or timed out
- TargetsFailedError: One or more bucket targets failed
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping


class S3FerryError(Exception):
    """Base exception for s3ferry errors."""


class ConfigValidationError(S3FerryError):
    """Configuration is missing required fields or is malformed."""


class StackOutputError(S3FerryError):
    """A stack output could not be resolved to a bucket name."""

    def __init__(self, output_key: str, stack_name: str | None, reason: str | None = None) -> None:
        self.output_key = output_key
        self.stack_name = stack_name
        message = f"Failed to resolve stack output '{output_key}' in stack '{stack_name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class S3OperationError(S3FerryError):
    """A store operation failed.

    Attributes:
        bucket: Name of the bucket the operation targeted, if known.
    """

    def __init__(self, message: str, bucket: str | None = None) -> None:
        self.bucket = bucket
        super().__init__(message)


class DeleteObjectsError(S3OperationError):
    """The store reported per-object failures for a delete batch."""

    def __init__(self, bucket: str, failed_keys: Iterable[str]) -> None:
        self.failed_keys = list(failed_keys)
        super().__init__(
            f"Failed to delete {len(self.failed_keys)} object(s) from {bucket}: "
            f"{', '.join(self.failed_keys)}",
            bucket=bucket,
        )


class TransferError(S3OperationError):
    """One or more files of a sync pass failed.

    Attributes:
        failures: Maps the object key (or local path) to the raised exception.
    """

    def __init__(self, bucket: str, failures: Mapping[str, BaseException]) -> None:
        self.failures = dict(failures)
        details = "; ".join(f"{name}: {exc}" for name, exc in sorted(self.failures.items()))
        super().__init__(
            f"{len(self.failures)} file(s) failed to sync with {bucket}: {details}",
            bucket=bucket,
        )


class PreCommandError(S3FerryError):
    """A pre-command exited with a non-zero status or timed out."""

    def __init__(self, command: str, reason: str) -> None:
        self.command = command
        self.reason = reason
        super().__init__(f"Pre-command failed: {command} ({reason})")


class TargetsFailedError(S3FerryError):
    """Raised after all targets ran when at least one of them failed."""

    def __init__(self, failures: Mapping[str, BaseException]) -> None:
        self.failures = dict(failures)
        details = "; ".join(f"{name}: {exc}" for name, exc in self.failures.items())
        super().__init__(f"{len(self.failures)} bucket target(s) failed: {details}")
