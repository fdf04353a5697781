"""Sync engine that orchestrates a full reconcile-and-pull cycle.

The ``SyncEngine`` runs these stages strictly in order, fanning out
inside a stage and waiting for every branch before moving on:

1. Validate the target format (before any I/O).
2. Prepare the workspace (``clean``, create the root).
3. Discover the remote languages and the reference language.
4. Read the local reference namespaces.
5. Diff every namespace against the remote reference content.
6. Push reference changes, then propagate removals to every other language.
7. Settle: wait briefly when something was pushed, so the pull sees it.
8. Pull every (language, namespace) pair back to disk, after removing
   stale language folders.

There is no per-item error handling: the first failure aborts the run
and propagates to the caller unchanged. Dry-run performs every read,
diff and encode step but no push, no directory change and no write.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from ..config import SyncOptions
from ..core.async_utils import gather_all, run_sync
from ..errors import InvalidContentError
from ..formats import Codec, get_codec
from . import writer
from .differ import build_payload, diff_namespace
from .models import (
    LocalNamespace,
    NamespaceDiff,
    NamespaceSyncResult,
    PulledNamespace,
    RemoteBlob,
    SyncReport,
)
from .paths import namespace_file
from .reader import read_reference

if TYPE_CHECKING:
    from ..core.client import RemoteClient

logger = logging.getLogger(__name__)


class SyncEngine:
    """Reconcile the reference language with the remote store and pull
    every language back to disk.

    Args:
        client: RemoteClient (or any object with the same methods).
        options: Options for this run.
    """

    def __init__(self, client: RemoteClient, options: SyncOptions) -> None:
        self.client = client
        self.options = options

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    async def run(self) -> SyncReport:
        """Execute a full sync cycle.

        Returns:
            A ``SyncReport`` describing what was (or would be) done.

        Raises:
            SyncError: Any stage failure; nothing after it runs.
        """
        started_at = datetime.now(timezone.utc).isoformat()
        codec = get_codec(self.options.format)

        await self._prepare_workspace()
        languages, reference = await self._discover_languages()

        local = await read_reference(self.options, reference)
        results: list[NamespaceSyncResult] = []
        if not local:
            logger.info(
                "No local namespaces for '%s', pulling everything", reference
            )
        else:
            compared = await self._diff_namespaces(local, reference)
            results = await self._push_namespaces(
                compared, languages, reference
            )

        # Folded after the push barrier; no branch mutates shared state
        changed = any(r.has_changes for r in results)
        await self._settle(changed)

        # Only an existing local reference can stand in for the remote one
        omit_reference = (
            bool(local) and self.options.omit_reference and not changed
        )
        removed, pulled = await self._pull_all(
            codec, languages, reference, omit_reference=omit_reference
        )

        logger.info("FINISHED")
        return SyncReport(
            project_id=self.options.project_id,
            version=self.options.version,
            reference_language=reference,
            format=self.options.format,
            dry_run=self.options.dry,
            languages=languages,
            namespaces=results,
            pulled=pulled,
            removed_languages=removed,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _prepare_workspace(self) -> None:
        if self.options.dry:
            return
        await run_sync(writer.prepare_workspace, self.options)

    async def _discover_languages(self) -> tuple[list[str], str]:
        """Return the remote language codes and the reference language.

        A configured reference language wins; otherwise the language
        flagged ``isReferenceLanguage`` (or the first one) is used.
        """
        metadata = await run_sync(self.client.list_languages)
        languages = list(metadata)

        reference = self.options.reference_language
        if not reference:
            reference = next(
                (
                    code
                    for code, meta in metadata.items()
                    if meta.get("isReferenceLanguage")
                ),
                languages[0],
            )
            logger.info("Using remote reference language '%s'", reference)
        elif reference not in metadata:
            logger.warning(
                "Reference language '%s' is not defined remotely (%s)",
                reference,
                ", ".join(languages),
            )
        return languages, reference

    async def _diff_namespaces(
        self, local: list[LocalNamespace], reference: str
    ) -> list[LocalNamespace]:
        """Attach the private flag and the remote diff to every record."""
        blobs = await run_sync(self.client.list_blobs)
        is_private = any(blob.is_private for blob in blobs)

        async def _compare(record: LocalNamespace) -> LocalNamespace:
            remote, _ = await run_sync(
                self.client.fetch_namespace,
                reference,
                record.namespace,
                is_private,
            )
            return record.model_copy(
                update={
                    "is_private": is_private,
                    "diff": diff_namespace(record.content, remote),
                }
            )

        return await gather_all(_compare(record) for record in local)

    async def _push_namespaces(
        self,
        compared: list[LocalNamespace],
        languages: list[str],
        reference: str,
    ) -> list[NamespaceSyncResult]:
        others = [lng for lng in languages if lng != reference]
        return await gather_all(
            self._push_namespace(record, reference, others)
            for record in compared
        )

    async def _push_namespace(
        self, record: LocalNamespace, reference: str, others: list[str]
    ) -> NamespaceSyncResult:
        """Push one namespace's changes, then its removals to ``others``."""
        diff = record.diff or NamespaceDiff()
        payload = build_payload(
            record.content, diff, self.options.update_values
        )
        self._log_changes(record.namespace, diff, payload)

        pushed = await self._push(reference, record.namespace, payload)

        propagated: list[str] = []
        if diff.to_remove:
            removal = build_payload({}, diff.removal_only())
            await gather_all(
                self._push(lng, record.namespace, removal) for lng in others
            )
            propagated = others

        return NamespaceSyncResult(
            namespace=record.namespace,
            diff=diff,
            payload_size=len(payload),
            pushed=pushed,
            propagated_to=propagated,
        )

    async def _push(
        self, language: str, namespace: str, payload: dict[str, str | None]
    ) -> bool:
        """Send *payload*; returns False when nothing was sent."""
        if not payload or self.options.dry:
            return False
        await run_sync(self.client.push_changes, language, namespace, payload)
        return True

    async def _settle(self, changed: bool) -> None:
        """Give the remote store time to expose what was just pushed."""
        if not changed or self.options.dry:
            return
        logger.info("syncing...")
        if self.options.settle_delay > 0:
            await asyncio.sleep(self.options.settle_delay)

    async def _pull_all(
        self,
        codec: Codec,
        languages: list[str],
        reference: str,
        omit_reference: bool = False,
    ) -> tuple[list[str], list[PulledNamespace]]:
        """Remove stale language folders, then pull every blob."""
        removed: list[str] = []
        if not self.options.dry:
            removed = await run_sync(
                writer.cleanup_languages, self.options, languages, reference
            )

        blobs = await run_sync(self.client.list_blobs)
        blobs = self._with_placeholders(blobs, languages, reference)
        if omit_reference:
            blobs = [b for b in blobs if b.language != reference]

        pulled = await gather_all(self._pull_one(codec, blob) for blob in blobs)
        return removed, sorted(pulled, key=lambda p: (p.language, p.namespace))

    async def _pull_one(self, codec: Codec, blob: RemoteBlob) -> PulledNamespace:
        if blob.is_placeholder:
            logger.debug(
                "%s/%s is not in the remote listing, creating it",
                blob.language,
                blob.namespace,
            )
        content, last_modified = await run_sync(
            self.client.fetch_namespace,
            blob.language,
            blob.namespace,
            blob.is_private,
        )
        path = namespace_file(self.options, blob.language, blob.namespace)

        if self.options.skip_empty and not content:
            logger.debug("Skipping empty %s/%s", blob.language, blob.namespace)
            return PulledNamespace(
                language=blob.language,
                namespace=blob.namespace,
                path=str(path),
                skipped_empty=True,
            )

        try:
            data = codec.encode(
                content,
                language=blob.language,
                namespace=blob.namespace,
                last_modified=last_modified or blob.last_modified,
            )
        except Exception as e:
            raise InvalidContentError(self.options.format, str(e)) from e

        if not self.options.dry:
            await run_sync(
                writer.write_namespace,
                self.options,
                blob.language,
                blob.namespace,
                data,
            )
        return PulledNamespace(
            language=blob.language,
            namespace=blob.namespace,
            path=str(path),
            written=not self.options.dry,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _with_placeholders(
        self, blobs: list[RemoteBlob], languages: list[str], reference: str
    ) -> list[RemoteBlob]:
        """Add a placeholder for every remote language lacking a namespace
        that exists in the reference language."""
        namespaces = sorted(
            {b.namespace for b in blobs if b.language == reference}
        )
        existing = {(b.language, b.namespace) for b in blobs}
        is_private = any(b.is_private for b in blobs)
        project = f"{self.options.project_id}/{self.options.version}"

        result = list(blobs)
        for lng in languages:
            for ns in namespaces:
                if (lng, ns) in existing:
                    continue
                result.append(
                    RemoteBlob(
                        key=f"{project}/{lng}/{ns}",
                        language=lng,
                        namespace=ns,
                        url=f"{self.options.api_path}/{project}/{lng}/{ns}",
                        is_private=is_private,
                    )
                )
        return result

    def _log_changes(
        self,
        namespace: str,
        diff: NamespaceDiff,
        payload: dict[str, str | None],
    ) -> None:
        dry = self.options.dry
        if diff.to_remove:
            logger.info("removing %d keys in %s...", len(diff.to_remove), namespace)
            if dry:
                logger.info(
                    "would remove %s in %s...", ", ".join(diff.to_remove), namespace
                )
        if diff.to_add:
            logger.info("adding %d keys in %s...", len(diff.to_add), namespace)
            if dry:
                logger.info(
                    "would add %s in %s...", ", ".join(diff.to_add), namespace
                )
        if self.options.update_values and diff.to_update:
            logger.info("updating %d keys in %s...", len(diff.to_update), namespace)
            if dry:
                logger.info(
                    "would update %s in %s...", ", ".join(diff.to_update), namespace
                )
        if not payload:
            logger.info("nothing to update for %s", namespace)


async def sync(
    options: SyncOptions, client: RemoteClient | None = None
) -> SyncReport:
    """Run one sync with *options* and return its report.

    Errors are raised to the caller instead of terminating the process.
    """
    if client is None:
        from ..core.client import RemoteClient

        client = RemoteClient(options)
    return await SyncEngine(client, options).run()
