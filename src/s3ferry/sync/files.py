"""Local file enumeration."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from s3ferry.core.config import IGNORED_FILE_NAMES
from s3ferry.core.paths import to_s3_path
from s3ferry.core.types import LocalFile

logger = logging.getLogger(__name__)


def iter_local_files(root: Path | str, log: Any = None) -> Iterator[LocalFile]:
    """Yield every regular file under ``root``.

    Symbolic links (to files or directories) are skipped with a warning and
    names in IGNORED_FILE_NAMES are skipped at every level. Each call walks
    the filesystem again.

    Args:
        root: Sync root directory.
        log: Logger-like object with ``error``/``warning``; defaults to the
            module logger.

    Yields:
        LocalFile with a forward-slash path relative to ``root``.
    """
    log = log or logger
    base_path = Path(root)

    if not base_path.is_dir():
        log.error(f"The directory {base_path} does not exist.")
        return

    def on_error(error: OSError) -> None:
        log.error(f"Cannot read {error.filename}: {error.strerror}")

    # os.walk with followlinks=False (default) doesn't descend into linked directories
    for root_str, dirs, files in os.walk(base_path, onerror=on_error):
        current = Path(root_str)

        kept_dirs = []
        for name in sorted(dirs):
            if (current / name).is_symlink():
                log.warning(f"Ignoring symbolic link: {current / name}")
            else:
                kept_dirs.append(name)
        dirs[:] = kept_dirs

        for filename in sorted(files):
            if filename in IGNORED_FILE_NAMES:
                continue

            file_path = current / filename
            if file_path.is_symlink():
                log.warning(f"Ignoring symbolic link: {file_path}")
                continue

            yield LocalFile(
                path=file_path,
                relative_path=to_s3_path(str(file_path.relative_to(base_path))),
            )
