"""Sync engines for directory-to-bucket synchronization.

Architecture:
    SyncOrchestrator → (per target) upload / metadata / tags / clear → WorkerPool

Components:
- **upload_directory**: Diff local tree against the bucket, upload changes, delete orphans
- **sync_directory_metadata**: Re-apply params to uploaded objects via in-place copy
- **SyncOrchestrator**: Runs operations for every configured target, isolating failures
- **WorkerPool**: Bounded thread pool with aggregate failure reporting
"""

from s3ferry.sync.files import iter_local_files
from s3ferry.sync.metadata import sync_directory_metadata
from s3ferry.sync.orchestrator import SyncOrchestrator, run_pre_command
from s3ferry.sync.pool import PoolResult, WorkerPool, WorkerTask
from s3ferry.sync.upload import upload_directory

__all__ = [
    "PoolResult",
    "SyncOrchestrator",
    "WorkerPool",
    "WorkerTask",
    "iter_local_files",
    "run_pre_command",
    "sync_directory_metadata",
    "upload_directory",
]
