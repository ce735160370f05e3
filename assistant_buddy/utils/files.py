"""File-system helpers: glob listing, directory setup and bundle cleanup."""

import os
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, Optional, Sequence

from ..errors import BuddyError
from ..structured_logging import get_logger

logger = get_logger("FILES")

BASE_DIR_EXCLUDES = (".git", "target", "__pycache__", ".venv", "node_modules")


def ensure_dir(dir: Path) -> bool:
    """Create ``dir`` when missing. Returns True when it was created."""
    if dir.is_dir():
        return False
    dir.mkdir(parents=True, exist_ok=True)
    return True


def _matches(path: Path, globs: Sequence[str]) -> bool:
    # Globs apply to the whole path and ``*`` crosses separators.
    posix = path.as_posix()
    return any(fnmatch(posix, glob) for glob in globs)


def list_files(
    dir: Path,
    include_globs: Optional[Sequence[str]] = None,
    exclude_globs: Optional[Sequence[str]] = None,
) -> list[Path]:
    """List files under ``dir`` in lexicographic walk order.

    Only the top level is scanned unless an include glob contains ``**``.
    """
    recursive = bool(include_globs) and any("**" in glob for glob in include_globs or ())
    files: list[Path] = []

    for root, dirs, names in os.walk(dir):
        if recursive:
            dirs[:] = sorted(d for d in dirs if d not in BASE_DIR_EXCLUDES)
        else:
            dirs[:] = []
        for name in sorted(names):
            path = Path(root) / name
            if exclude_globs and _matches(path, exclude_globs):
                continue
            if include_globs is not None and not _matches(path, include_globs):
                continue
            if path.is_file():
                files.append(path)

    return files


def is_within(path: Path, dir: Path) -> bool:
    return path.resolve().is_relative_to(dir.resolve())


def purge_stale_bundles(files_dir: Path, extensions: Iterable[str], keep_marker: str) -> list[Path]:
    """Delete bundle files in ``files_dir`` whose name lacks ``keep_marker``.

    Every candidate is checked to sit under ``files_dir`` before anything is
    removed; a path outside it aborts the purge.
    """
    include = [f"*.{ext}" for ext in sorted(set(extensions))]
    if not include:
        return []

    stale = list_files(files_dir, include, [f"*{keep_marker}*"])
    for file in stale:
        if not is_within(file, files_dir):
            raise BuddyError(f"Refusing to delete file outside '{files_dir}': '{file}'")

    for file in stale:
        file.unlink()
        logger.info("Stale bundle removed", path=str(file))

    return stale
