"""Reference-language sync engine.

Public API for reconciling a local tree of translation files with the
remote translation service.

Modules:

- ``engine``   -- ``SyncEngine``: orchestrates a full sync cycle.
- ``differ``   -- ``diff_namespace``/``build_payload``: per-namespace diff.
- ``reader``   -- ``read_reference``: decode the reference-language files.
- ``writer``   -- workspace preparation, stale folder cleanup, file output.
- ``models``   -- ``NamespaceDiff``, ``LocalNamespace``, ``RemoteBlob``,
  ``NamespaceSyncResult``, ``PulledNamespace``, ``SyncReport``.
- ``reporter`` -- Human-readable and JSON report formatting.

Usage example
-------------
::

    import asyncio
    from locale_sync.config import SyncOptions
    from locale_sync.sync import format_sync_report, sync

    options = SyncOptions(project_id="my-project", path="locales", dry=True)
    report = asyncio.run(sync(options))
    print(format_sync_report(report))
"""

from .differ import build_payload, diff_namespace
from .engine import SyncEngine, sync
from .models import (
    LocalNamespace,
    NamespaceDiff,
    NamespaceSyncResult,
    PulledNamespace,
    RemoteBlob,
    SyncReport,
)
from .reader import read_reference
from .reporter import (
    format_dry_run_preview,
    format_sync_report,
    report_to_json,
)

__all__ = [
    "LocalNamespace",
    "NamespaceDiff",
    "NamespaceSyncResult",
    "PulledNamespace",
    "RemoteBlob",
    "SyncEngine",
    "SyncReport",
    "build_payload",
    "diff_namespace",
    "format_dry_run_preview",
    "format_sync_report",
    "read_reference",
    "report_to_json",
    "sync",
]
