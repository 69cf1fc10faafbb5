"""Shared types for s3ferry.

This module provides:
- RemoteObject: One entry of a bucket listing
- LocalFile: A regular file found under a sync root
- PlannedUpload, MetadataUpdate, SyncPlan: Work derived for one pass
- SyncResult: What a pass actually did
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Any

from s3ferry.core.hashing import compute_file_md5, is_multipart_etag


@dataclass(frozen=True)
class RemoteObject:
    """An object as reported by a bucket listing.

    Attributes:
        key: Object key.
        etag: Entity tag, including the surrounding quotes.
        size: Size in bytes.
    """

    key: str
    etag: str | None = None
    size: int | None = None

    @property
    def is_multipart(self) -> bool:
        """True if the ETag is a multipart composite, not a content hash."""
        return is_multipart_etag(self.etag)


@dataclass(frozen=True)
class LocalFile:
    """A regular file under a sync root.

    The content hash is computed on first access and cached for the
    lifetime of the instance, i.e. at most once per sync pass.
    """

    path: Path
    relative_path: str

    @cached_property
    def etag(self) -> str:
        """Quoted MD5 of the file content."""
        return compute_file_md5(self.path)


@dataclass(frozen=True)
class PlannedUpload:
    """A local file that may need uploading."""

    file: LocalFile
    key: str
    params: dict[str, Any]
    remote: RemoteObject | None = None

    def is_unchanged(self) -> bool:
        """Check whether the remote object already holds this content.

        Only simple ETags are trusted; multipart ETags always re-upload.
        Hashes the file, so call it inside the bounded unit of work.
        """
        if self.remote is None or not self.remote.etag or self.remote.is_multipart:
            return False
        return self.file.etag == self.remote.etag


@dataclass(frozen=True)
class MetadataUpdate:
    """An existing object whose metadata is replaced in place."""

    file: LocalFile
    key: str
    params: dict[str, Any]


@dataclass
class SyncPlan:
    """Work derived for one sync pass; discarded when the pass ends."""

    uploads: list[PlannedUpload] = field(default_factory=list)
    deletions: list[str] = field(default_factory=list)
    metadata: list[MetadataUpdate] = field(default_factory=list)

    @property
    def total_operations(self) -> int:
        """Uploads plus one unit for the delete phase, if any."""
        return len(self.uploads) + (1 if self.deletions else 0)


@dataclass
class SyncResult:
    """Outcome of a sync pass."""

    uploaded: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)
