"""File walker for discovering indexable files under a root directory."""

import logging
import os
from collections.abc import Callable, Iterable, Iterator
from datetime import datetime, timezone
from pathlib import Path

from docvec.indexer.fingerprint import compute_fingerprint
from docvec.indexer.models import FileDescriptor

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[Path, OSError], None]


def normalize_extensions(extensions: Iterable[str]) -> set[str]:
    """Lower-case extensions and strip any leading dot."""
    return {ext.lower().lstrip(".") for ext in extensions if ext.strip(".")}


def file_extension(name: str) -> str:
    """Extension of a file name, lower-cased and without the dot."""
    return Path(name).suffix.lower().lstrip(".")


def describe_file(path: Path, stat: os.stat_result) -> FileDescriptor:
    """Build a FileDescriptor from a path and its stat data."""
    # Creation time where the platform records it, inode change time otherwise
    created_ts = getattr(stat, "st_birthtime", None) or stat.st_ctime
    created = datetime.fromtimestamp(created_ts, tz=timezone.utc)
    modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)

    return FileDescriptor(
        path=path,
        name=path.name,
        extension=file_extension(path.name),
        created=created,
        modified=modified,
        size=stat.st_size,
        fingerprint=compute_fingerprint(path.name, created, modified, stat.st_size),
    )


def walk_directory(
    root: Path,
    extensions: Iterable[str],
    on_error: ErrorHandler | None = None,
) -> Iterator[FileDescriptor]:
    """
    Walk root and yield a FileDescriptor for every file whose extension is allowed.

    Uses an explicit stack rather than recursion. Every subdirectory is
    visited; symlinked directories are not followed. An unreadable directory
    or file is logged (and passed to on_error) and skipped without stopping
    the walk. Entries of one directory are visited in name order; the order
    across directories is an implementation detail.
    """
    allowed = normalize_extensions(extensions)

    if not root.is_dir():
        logger.warning("Scan root does not exist or is not a directory: %s", root)
        return

    stack: list[Path] = [root]
    while stack:
        directory = stack.pop()

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.error("Cannot read directory %s: %s", directory, e)
            if on_error:
                on_error(directory, e)
            continue

        subdirs: list[Path] = []
        for entry in entries:
            entry_path = Path(entry.path)
            try:
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append(entry_path)
                    continue
                if not entry.is_file():
                    continue
                if file_extension(entry.name) not in allowed:
                    continue
                stat = entry.stat()
            except OSError as e:
                logger.error("Cannot stat %s: %s", entry_path, e)
                if on_error:
                    on_error(entry_path, e)
                continue

            yield describe_file(entry_path, stat)

        # Reversed so subdirectories are popped in name order
        stack.extend(reversed(subdirs))
