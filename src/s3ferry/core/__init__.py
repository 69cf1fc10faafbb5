"""Core module - Configuration, errors, params and shared types."""

from s3ferry.core.config import (
    DEFAULT_MAX_CONCURRENCY,
    FerryConfig,
    FerryOptions,
    ParamRule,
    SyncTarget,
    load_config,
    parse_bucket_config,
)
from s3ferry.core.errors import (
    ConfigValidationError,
    DeleteObjectsError,
    PreCommandError,
    S3FerryError,
    S3OperationError,
    StackOutputError,
    TargetsFailedError,
    TransferError,
)
from s3ferry.core.hashing import compute_file_md5, is_multipart_etag
from s3ferry.core.params import glob_match, resolve_params
from s3ferry.core.progress import NullProgress, Progress, ProgressFactory, ProgressTracker
from s3ferry.core.types import LocalFile, RemoteObject, SyncPlan, SyncResult

__all__ = [
    # Config
    "DEFAULT_MAX_CONCURRENCY",
    "FerryConfig",
    "FerryOptions",
    "ParamRule",
    "SyncTarget",
    "load_config",
    "parse_bucket_config",
    # Errors
    "ConfigValidationError",
    "DeleteObjectsError",
    "PreCommandError",
    "S3FerryError",
    "S3OperationError",
    "StackOutputError",
    "TargetsFailedError",
    "TransferError",
    # Hashing
    "compute_file_md5",
    "is_multipart_etag",
    # Params
    "glob_match",
    "resolve_params",
    # Progress
    "NullProgress",
    "Progress",
    "ProgressFactory",
    "ProgressTracker",
    # Types
    "LocalFile",
    "RemoteObject",
    "SyncPlan",
    "SyncResult",
]
