"""Local repository reader: decode every namespace of the reference language."""

from __future__ import annotations

import logging
from pathlib import Path

from .. import file_handler
from ..config import SyncOptions
from ..core.async_utils import gather_all, run_sync
from ..errors import FormatMismatchError, InvalidContentError
from ..formats import ACCEPTED_EXTENSIONS, formats_for_extension, get_codec
from .models import LocalNamespace
from .paths import language_dir

logger = logging.getLogger(__name__)


async def read_reference(
    options: SyncOptions, reference_language: str
) -> list[LocalNamespace]:
    """Read and decode the namespace files of the reference language.

    The reference directory is created unless ``options.dry`` is set; a
    directory that does not exist yields an empty list (first sync).

    Raises:
        FormatMismatchError: A file's extension belongs to another format.
        InvalidContentError: A file could not be decoded; the message
            names the format and the file.
        FilesystemError: A file could not be listed or read.
    """
    ref_dir = language_dir(options, reference_language)
    if not options.dry:
        await run_sync(file_handler.ensure_dir, ref_dir)

    files = await run_sync(file_handler.list_files, ref_dir, ACCEPTED_EXTENSIONS)
    logger.debug("Found %d reference file(s) in %s", len(files), ref_dir)

    records = await gather_all(
        _read_namespace(options, reference_language, path) for path in files
    )
    return sorted(records, key=lambda r: r.namespace)


async def _read_namespace(
    options: SyncOptions, reference_language: str, path: Path
) -> LocalNamespace:
    candidates = formats_for_extension(path.suffix)
    if options.format not in candidates:
        raise FormatMismatchError(candidates[0].value, options.format)

    data = await run_sync(file_handler.read_bytes, path)
    try:
        content = get_codec(options.format).decode(data, reference_language)
    except Exception as e:
        raise InvalidContentError(options.format, str(e), str(path)) from e

    return LocalNamespace(
        namespace=path.stem,
        path=str(path),
        extension=path.suffix,
        content=content,
    )
