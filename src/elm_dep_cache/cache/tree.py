"""Recursive copy and delete primitives for directory trees.

Both walks use an explicit stack instead of recursion so that deeply
nested dependency trees never hit the interpreter's recursion limit.
"""

import logging
import os
import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class CopyStats:
    """Counters collected while copying a tree."""

    files_copied: int = 0
    directories_created: int = 0
    skipped: list[Path] = field(default_factory=list)


def _ensure_dir(path: Path, stats: CopyStats) -> None:
    if not path.is_dir():
        path.mkdir(parents=True, exist_ok=True)
        stats.directories_created += 1


def copy_tree(src: Path, dest: Path, stats: Optional[CopyStats] = None) -> CopyStats:
    """Copy every entry under src into dest, overwriting same-named files.

    Entries that exist only in dest are left alone. Symlinks to regular
    files are dereferenced; symlinks to directories, dangling links and
    special files are skipped with a warning.

    Args:
        src: Source directory
        dest: Destination directory (created if missing)
        stats: Optional counters to accumulate into

    Returns:
        Copy statistics

    Raises:
        OSError: On the first filesystem error
    """
    stats = stats if stats is not None else CopyStats()
    src = Path(src)
    dest = Path(dest)

    _ensure_dir(dest, stats)
    stack: list[tuple[Path, Path]] = [(src, dest)]

    while stack:
        src_dir, dest_dir = stack.pop()
        with os.scandir(src_dir) as entries:
            for entry in entries:
                src_path = Path(entry.path)
                dest_path = dest_dir / entry.name

                if entry.is_symlink():
                    # Links into directories can form cycles
                    if entry.is_dir(follow_symlinks=True) or not entry.is_file(follow_symlinks=True):
                        logger.warning(f"Skipping symlink: {src_path}")
                        stats.skipped.append(src_path)
                        continue
                    shutil.copyfile(src_path, dest_path)
                    stats.files_copied += 1
                elif entry.is_dir(follow_symlinks=False):
                    _ensure_dir(dest_path, stats)
                    stack.append((src_path, dest_path))
                elif stat.S_ISREG(entry.stat(follow_symlinks=False).st_mode):
                    shutil.copyfile(src_path, dest_path)
                    stats.files_copied += 1
                else:
                    logger.warning(f"Skipping special file: {src_path}")
                    stats.skipped.append(src_path)

    return stats


def remove_tree(path: Path) -> int:
    """Delete a directory and everything below it, bottom-up.

    Symlinks are unlinked and never followed.

    Args:
        path: Directory to remove

    Returns:
        Number of files removed

    Raises:
        OSError: On the first filesystem error
    """
    path = Path(path)
    files_removed = 0
    # Directories in the order they were entered; removed in reverse
    visited: list[Path] = []
    stack = [path]

    while stack:
        current = stack.pop()
        visited.append(current)
        with os.scandir(current) as entries:
            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    stack.append(Path(entry.path))
                else:
                    os.unlink(entry.path)
                    files_removed += 1

    for directory in reversed(visited):
        os.rmdir(directory)

    return files_removed
