"""File handler module: directory and file primitives for the local tree.

Every ``OSError`` is re-raised as ``FilesystemError`` carrying the path,
so the engine sees a single error family for local I/O. The functions are
blocking; the sync engine calls them through ``run_sync()``.
"""

import shutil
from pathlib import Path

from .errors import FilesystemError

# =============================================================================
# Directories
# =============================================================================


def ensure_dir(path: Path) -> None:
    """Create *path* and its parents if missing."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Cannot create directory {path}: {e}", str(path)) from e


def remove_tree(path: Path) -> None:
    """Delete a file or a directory tree; a missing path is not an error."""
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
    except OSError as e:
        raise FilesystemError(f"Cannot remove {path}: {e}", str(path)) from e


def clear_dir(path: Path) -> list[Path]:
    """Remove every non-hidden entry directly inside *path*.

    Returns:
        The removed paths. A missing directory yields an empty list.
    """
    removed = []
    for entry in list_entries(path):
        if entry.name.startswith("."):
            continue
        remove_tree(entry)
        removed.append(entry)
    return removed


def list_entries(path: Path) -> list[Path]:
    """Return the entries of *path* sorted by name, or [] if it is missing."""
    if not path.is_dir():
        return []
    try:
        return sorted(path.iterdir())
    except OSError as e:
        raise FilesystemError(f"Cannot list {path}: {e}", str(path)) from e


def list_files(path: Path, extensions: frozenset[str]) -> list[Path]:
    """Return regular files directly inside *path* with one of *extensions*."""
    return [
        entry
        for entry in list_entries(path)
        if entry.is_file() and entry.suffix in extensions
    ]


def list_dirs(path: Path) -> list[Path]:
    """Return non-hidden subdirectories directly inside *path*."""
    return [
        entry
        for entry in list_entries(path)
        if entry.is_dir() and not entry.name.startswith(".")
    ]


# =============================================================================
# File Read/Write
# =============================================================================


def read_bytes(path: Path) -> bytes:
    """Read a file's raw bytes."""
    try:
        return path.read_bytes()
    except OSError as e:
        raise FilesystemError(f"Cannot read {path}: {e}", str(path)) from e


def write_bytes(path: Path, data: bytes) -> int:
    """Write bytes to a file, creating parent directories as needed.

    Returns:
        Number of bytes written.
    """
    ensure_dir(path.parent)
    try:
        path.write_bytes(data)
    except OSError as e:
        raise FilesystemError(f"Cannot write {path}: {e}", str(path)) from e
    return len(data)
