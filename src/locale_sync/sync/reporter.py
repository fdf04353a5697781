"""Sync report formatting functions.

Provides human-readable and machine-readable output for sync runs:

- ``format_sync_report`` -- full post-sync summary.
- ``format_dry_run_preview`` -- the changes a dry run would push.
- ``report_to_json`` -- structured dict for ``--json`` output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import SyncReport


def format_sync_report(report: SyncReport) -> str:
    """Format a complete sync report as human-readable text.

    Sections are only included when they contain at least one entry.
    Namespaces without changes are summarised by count only.

    Args:
        report: The completed sync report.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    header = (
        f"Sync report for '{report.project_id}' ({report.version}), "
        f"reference language '{report.reference_language}'"
    )
    if report.dry_run:
        header += " (DRY RUN)"
    lines.append(header)
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    lines.append("")

    changed = [r for r in report.namespaces if r.has_changes]
    unchanged = len(report.namespaces) - len(changed)
    lines.append(
        f"Synced {len(report.namespaces)} namespaces across "
        f"{len(report.languages)} languages: "
        f"{len(changed)} changed, {len(report.written)} files written, "
        f"{len(report.skipped_empty)} empty skipped"
    )
    lines.append("")

    if changed:
        lines.append("Pushed:" if not report.dry_run else "Would push:")
        for r in changed:
            diff = r.diff
            lines.append(
                f"  {r.namespace}: +{len(diff.to_add)} "
                f"-{len(diff.to_remove)} ~{len(diff.to_update)}"
            )
            if r.propagated_to:
                lines.append(
                    f"    removals propagated to {', '.join(r.propagated_to)}"
                )
        lines.append("")

    if report.removed_languages:
        lines.append("Removed language folders:")
        for lng in report.removed_languages:
            lines.append(f"  {lng}")
        lines.append("")

    if report.skipped_empty:
        lines.append("Skipped (empty):")
        for p in report.skipped_empty:
            lines.append(f"  {p.language}/{p.namespace}")
        lines.append("")

    if unchanged > 0:
        lines.append(f"Unchanged: {unchanged} namespaces")
        lines.append("")

    return "\n".join(lines).rstrip()


def format_dry_run_preview(report: SyncReport) -> str:
    """List the key changes a dry run found, namespace by namespace.

    Args:
        report: A dry-run sync report (``dry_run=True``).

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = [
        "DRY RUN -- No changes will be made",
        f"Project: {report.project_id} ({report.version})",
        "",
    ]

    for r in report.namespaces:
        if r.diff.is_empty:
            continue
        lines.append(f"{r.namespace}:")
        for key in r.diff.to_add:
            lines.append(f"  [ADD]    {key}")
        for key in r.diff.to_remove:
            lines.append(f"  [REMOVE] {key}")
        for key in r.diff.to_update:
            lines.append(f"  [UPDATE] {key}")
        lines.append("")

    if len(lines) == 3:
        lines.append("Nothing to update.")

    lines.append(f"Would write {len(report.pulled)} files.")
    return "\n".join(lines)


def report_to_json(report: SyncReport) -> dict:
    """Convert a sync report to a JSON-serializable dict.

    Args:
        report: The sync report.

    Returns:
        Dict with summary counts and per-namespace details.
    """
    return {
        "project_id": report.project_id,
        "version": report.version,
        "reference_language": report.reference_language,
        "format": report.format,
        "dry_run": report.dry_run,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "languages": report.languages,
        "summary": {
            "namespaces": len(report.namespaces),
            "changed": sum(1 for r in report.namespaces if r.has_changes),
            "written": len(report.written),
            "skipped_empty": len(report.skipped_empty),
            "removed_languages": len(report.removed_languages),
        },
        "namespaces": [
            {
                "namespace": r.namespace,
                "to_add": r.diff.to_add,
                "to_update": r.diff.to_update,
                "to_remove": r.diff.to_remove,
                "pushed": r.pushed,
                "propagated_to": r.propagated_to,
            }
            for r in report.namespaces
        ],
        "pulled": [
            p.model_dump() for p in report.pulled
        ],
        "removed_languages": report.removed_languages,
    }
