"""Local repository writer: workspace preparation, stale language cleanup
and namespace file output.

All functions are blocking and meant to be called through ``run_sync()``.
None of them is called under dry-run; the engine decides that.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .. import file_handler
from ..config import SyncOptions
from .paths import language_dir, namespace_file

logger = logging.getLogger(__name__)


def prepare_workspace(options: SyncOptions) -> None:
    """Empty the local root when ``clean`` is set, then make sure it exists."""
    root = Path(options.path)
    if options.clean:
        removed = file_handler.clear_dir(root)
        logger.info("Cleaned %d entr(ies) under %s", len(removed), root)
    file_handler.ensure_dir(root)


def cleanup_languages(
    options: SyncOptions,
    remote_languages: list[str],
    reference_language: str,
) -> list[str]:
    """Delete language folders the remote no longer knows and create the
    folder of every remote language.

    Only non-hidden directories carrying the language folder prefix are
    considered; the reference language folder is always kept.

    Returns:
        Language codes whose folders were deleted.
    """
    prefix = options.language_folder_prefix
    keep = {language_dir(options, lng).name for lng in remote_languages}
    keep.add(language_dir(options, reference_language).name)

    removed: list[str] = []
    for folder in file_handler.list_dirs(Path(options.path)):
        if not folder.name.startswith(prefix) or folder.name in keep:
            continue
        logger.info("Removing stale language folder %s", folder)
        file_handler.remove_tree(folder)
        removed.append(folder.name[len(prefix):])

    for lng in remote_languages:
        file_handler.ensure_dir(language_dir(options, lng))
    return removed


def write_namespace(
    options: SyncOptions, language: str, namespace: str, data: bytes
) -> Path:
    """Write encoded namespace content to its file and return the path."""
    path = namespace_file(options, language, namespace)
    file_handler.write_bytes(path, data)
    logger.debug("Wrote %s (%d bytes)", path, len(data))
    return path
