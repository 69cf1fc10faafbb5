"""Tests for local file enumeration."""

import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from s3ferry.sync.files import iter_local_files


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """Create a small site tree."""
    root = tmp_path / "dist"
    (root / "css").mkdir(parents=True)
    (root / "index.html").write_text("<h1>hi</h1>")
    (root / "css" / "site.css").write_text("body {}")
    (root / ".DS_Store").write_bytes(b"\0")
    (root / "css" / ".DS_Store").write_bytes(b"\0")
    return root


class TestIterLocalFiles:
    """Tests for iter_local_files()."""

    def test_lists_regular_files(self, tree: Path) -> None:
        """Should yield every regular file with a forward-slash relative path."""
        files = list(iter_local_files(tree))

        assert sorted(f.relative_path for f in files) == ["css/site.css", "index.html"]
        assert all(f.path.is_file() for f in files)

    def test_skips_ignored_names_at_every_level(self, tree: Path) -> None:
        """.DS_Store is never yielded."""
        names = [f.path.name for f in iter_local_files(tree)]
        assert ".DS_Store" not in names

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_skips_symlinks_with_warning(self, tree: Path, tmp_path: Path) -> None:
        """Symbolic links to files and directories are skipped with a warning."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("x")
        (tree / "link.txt").symlink_to(tree / "index.html")
        (tree / "linked-dir").symlink_to(outside, target_is_directory=True)
        log = MagicMock()

        relative = sorted(f.relative_path for f in iter_local_files(tree, log))

        assert relative == ["css/site.css", "index.html"]
        warnings = [call.args[0] for call in log.warning.call_args_list]
        assert any("link.txt" in w for w in warnings)
        assert any("linked-dir" in w for w in warnings)

    def test_missing_root_logs_error(self, tmp_path: Path) -> None:
        """A missing root yields nothing and reports an error."""
        log = MagicMock()

        assert list(iter_local_files(tmp_path / "missing", log)) == []
        log.error.assert_called_once()
        assert "does not exist" in log.error.call_args.args[0]

    def test_walks_again_on_each_call(self, tree: Path) -> None:
        """Each call sees the current filesystem."""
        assert len(list(iter_local_files(tree))) == 2

        (tree / "new.txt").write_text("new")

        assert len(list(iter_local_files(tree))) == 3
