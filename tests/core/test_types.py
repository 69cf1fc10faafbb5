"""Tests for shared types."""

from pathlib import Path

from s3ferry.core.hashing import compute_file_md5
from s3ferry.core.types import LocalFile, PlannedUpload, RemoteObject, SyncPlan


def make_upload(tmp_path: Path, content: bytes, remote: RemoteObject | None) -> PlannedUpload:
    path = tmp_path / "index.html"
    path.write_bytes(content)
    return PlannedUpload(
        file=LocalFile(path=path, relative_path="index.html"),
        key="index.html",
        params={},
        remote=remote,
    )


class TestPlannedUpload:
    """Tests for PlannedUpload.is_unchanged()."""

    def test_new_file(self, tmp_path: Path) -> None:
        """A file with no remote counterpart needs uploading."""
        assert make_upload(tmp_path, b"a", None).is_unchanged() is False

    def test_same_content(self, tmp_path: Path) -> None:
        """A matching simple ETag means the file is unchanged."""
        path = tmp_path / "ref"
        path.write_bytes(b"same")
        remote = RemoteObject("index.html", etag=compute_file_md5(path))

        assert make_upload(tmp_path, b"same", remote).is_unchanged() is True

    def test_changed_content(self, tmp_path: Path) -> None:
        """A different ETag means the file changed."""
        remote = RemoteObject("index.html", etag='"00000000000000000000000000000000"')
        assert make_upload(tmp_path, b"new", remote).is_unchanged() is False

    def test_multipart_etag_is_never_trusted(self, tmp_path: Path) -> None:
        """Objects with a multipart ETag are always re-uploaded."""
        remote = RemoteObject("index.html", etag='"abc-2"')
        assert remote.is_multipart is True
        assert make_upload(tmp_path, b"x", remote).is_unchanged() is False


class TestSyncPlan:
    """Tests for SyncPlan."""

    def test_total_without_deletions(self, tmp_path: Path) -> None:
        """Only uploads count when nothing is deleted."""
        plan = SyncPlan(uploads=[make_upload(tmp_path, b"a", None)])
        assert plan.total_operations == 1

    def test_delete_phase_counts_once(self, tmp_path: Path) -> None:
        """The delete phase is a single unit regardless of key count."""
        plan = SyncPlan(uploads=[make_upload(tmp_path, b"a", None)], deletions=["x", "y", "z"])
        assert plan.total_operations == 2
