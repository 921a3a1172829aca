import os
import logging
from pathlib import PurePosixPath
from typing import Callable, FrozenSet, Iterable, Iterator, NamedTuple, Tuple


logger = logging.getLogger('mybackup')

ALLOWED_EXTENSIONS = frozenset({
    ".jpg", ".jpeg", ".png", ".gif", ".webp",
    ".mp4", ".avi", ".mkv", ".mov",
    ".txt", ".pdf", ".docx", ".md",
})

# Matched as plain string prefixes of the root-relative path, so ".cache"
# also excludes ".cache-extra".
EXCLUDED_PREFIXES: Tuple[str, ...] = (
    ".PlayOnLinux",
    ".wine",
    "node_modules",
    ".cache",
    ".local/share/Trash",
)


class FileCandidate(NamedTuple):
    """A regular file under the scan root that passed the backup policy."""

    absolute_path: str
    relative_path: str
    extension: str


def is_excluded(relative_path: str, excluded_prefixes: Iterable[str] = EXCLUDED_PREFIXES) -> bool:
    """Return True if a root-relative directory path starts with an excluded prefix."""
    return any(relative_path.startswith(prefix) for prefix in excluded_prefixes)


def file_extension(name: str) -> str:
    """Lower-cased extension of a file name, including the leading dot."""
    return os.path.splitext(name)[1].lower()


def walk_candidates(
    root: str,
    scandir: Callable[[str], Iterable[os.DirEntry]] = os.scandir,
    allowed_extensions: Iterable[str] = ALLOWED_EXTENSIONS,
    excluded_prefixes: Iterable[str] = EXCLUDED_PREFIXES,
) -> Iterator[FileCandidate]:
    """
    Lazily yield backup candidates under root, depth-first.

    Symbolic links are never yielded nor followed. Directories whose path
    relative to root starts with an excluded prefix are not descended.
    Regular files are yielded only when their extension is allowed.

    Args:
        root (str): Directory to scan
        scandir (callable): Directory enumerator returning entries with
            ``name``, ``path``, ``is_symlink()``, ``is_dir()`` and ``is_file()``.
            Defaults to ``os.scandir``; tests pass a virtual one.
        allowed_extensions: Lower-case extensions (with dot) to include
        excluded_prefixes: Root-relative path prefixes to prune

    Yields:
        FileCandidate: One per eligible file, in enumeration order

    Raises:
        OSError: If a directory cannot be listed
    """
    allowed = frozenset(ext.lower() for ext in allowed_extensions)
    prefixes = tuple(excluded_prefixes)
    yield from _walk(root, PurePosixPath(), scandir, allowed, prefixes)


def _walk(
    directory: str,
    relative_dir: PurePosixPath,
    scandir: Callable[[str], Iterable[os.DirEntry]],
    allowed: FrozenSet[str],
    prefixes: Tuple[str, ...],
) -> Iterator[FileCandidate]:
    """Recursive step of walk_candidates for one directory."""
    iterator = scandir(directory)
    try:
        # Materialize so the directory handle is released before recursing
        entries = list(iterator)
    finally:
        if hasattr(iterator, 'close'):
            iterator.close()

    for entry in entries:
        relative = (relative_dir / entry.name).as_posix()

        if entry.is_symlink():
            logger.debug(f"Skipping symbolic link '{relative}'")
            continue

        if entry.is_dir(follow_symlinks=False):
            if is_excluded(relative, prefixes):
                logger.debug(f"Skipping excluded directory '{relative}'")
                continue
            yield from _walk(entry.path, relative_dir / entry.name, scandir, allowed, prefixes)
        elif entry.is_file(follow_symlinks=False):
            extension = file_extension(entry.name)
            if extension in allowed:
                yield FileCandidate(entry.path, relative, extension)
