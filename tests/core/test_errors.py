"""Tests for the exception hierarchy."""

from s3ferry.core.errors import (
    DeleteObjectsError,
    PreCommandError,
    S3FerryError,
    S3OperationError,
    StackOutputError,
    TargetsFailedError,
    TransferError,
)


class TestErrors:
    """Tests for error messages and attributes."""

    def test_hierarchy(self) -> None:
        """Every error derives from S3FerryError."""
        assert issubclass(DeleteObjectsError, S3OperationError)
        assert issubclass(TransferError, S3OperationError)
        assert issubclass(S3OperationError, S3FerryError)
        assert issubclass(PreCommandError, S3FerryError)

    def test_stack_output_message(self) -> None:
        """Should name the output key and the stack."""
        error = StackOutputError("SiteBucket", "my-stack")
        assert str(error) == "Failed to resolve stack output 'SiteBucket' in stack 'my-stack'"

    def test_delete_objects_names_keys(self) -> None:
        """Should list every failed key."""
        error = DeleteObjectsError("site", ["a.txt", "b.txt"])
        assert error.failed_keys == ["a.txt", "b.txt"]
        assert error.bucket == "site"
        assert "a.txt, b.txt" in str(error)

    def test_transfer_error_keeps_causes(self) -> None:
        """Should keep the original exception per file."""
        cause = OSError("unreadable")
        error = TransferError("site", {"index.html": cause})
        assert error.failures == {"index.html": cause}
        assert "1 file(s) failed" in str(error)

    def test_targets_failed(self) -> None:
        """Should summarize every failed target."""
        error = TargetsFailedError({"#0 site": PreCommandError("make", "exit status 2")})
        assert "1 bucket target(s) failed" in str(error)
        assert "Pre-command failed: make (exit status 2)" in str(error)
