"""Pydantic models for the sync engine.

Defines the data contracts passed between the sync stages:

- ``NamespaceDiff``: keys to add, update and remove for one namespace.
- ``LocalNamespace``: one reference-language file, decoded.
- ``RemoteBlob``: one (language, namespace) pair known to the remote store.
- ``NamespaceSyncResult``: outcome of pushing one namespace.
- ``PulledNamespace``: outcome of pulling one (language, namespace) pair.
- ``SyncReport``: aggregate results for a full sync run.

All models are frozen (immutable) for safety.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class NamespaceDiff(BaseModel):
    """Keys that differ between the local and remote copy of a namespace.

    The three lists are disjoint.
    """

    to_add: list[str] = []
    to_update: list[str] = []
    to_remove: list[str] = []

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not (self.to_add or self.to_update or self.to_remove)

    def removal_only(self) -> NamespaceDiff:
        """Copy of this diff without additions and updates."""
        return NamespaceDiff(to_remove=list(self.to_remove))


class LocalNamespace(BaseModel):
    """A namespace file found in the reference-language directory.

    Attributes:
        namespace: File name without extension.
        path: Full path of the file.
        extension: File extension including the dot.
        content: Flat key/value mapping decoded from the file.
        is_private: Whether the remote project is private.
        diff: Diff against the remote reference content, once computed.
    """

    namespace: str
    path: str
    extension: str
    content: dict[str, str | None] = {}
    is_private: bool = False
    diff: NamespaceDiff | None = None

    model_config = {"frozen": True}


class RemoteBlob(BaseModel):
    """One (language, namespace) pair in the remote store.

    ``last_modified`` is ``None`` for placeholders standing in for a
    namespace that does not exist yet in that language.
    """

    key: str
    language: str
    namespace: str
    last_modified: datetime | None = None
    size: int = 0
    url: str = ""
    is_private: bool = False

    model_config = {"frozen": True}

    @property
    def is_placeholder(self) -> bool:
        return self.last_modified is None

    @classmethod
    def from_listing(cls, entry: dict) -> RemoteBlob:
        """Build a blob from one entry of the remote download listing.

        Language and namespace are the last two ``/`` segments of the key;
        private projects carry one extra segment before them.
        """
        key = entry["key"]
        segments = key.split("/")
        if len(segments) < 4:
            raise ValueError(f"Unexpected blob key '{key}'")
        return cls(
            key=key,
            language=segments[-2],
            namespace=segments[-1],
            last_modified=entry.get("lastModified"),
            size=entry.get("size") or 0,
            url=entry.get("url") or "",
            is_private=bool(entry.get("isPrivate")),
        )


class NamespaceSyncResult(BaseModel):
    """Outcome of reconciling one reference-language namespace.

    Attributes:
        namespace: Namespace name.
        diff: The computed diff.
        payload_size: Number of keys in the update payload.
        pushed: Whether the payload was sent (False when empty or dry).
        propagated_to: Languages that received the removal-only payload.
    """

    namespace: str
    diff: NamespaceDiff
    payload_size: int = 0
    pushed: bool = False
    propagated_to: list[str] = []

    model_config = {"frozen": True}

    @property
    def has_changes(self) -> bool:
        return self.payload_size > 0


class PulledNamespace(BaseModel):
    """Outcome of pulling one (language, namespace) pair."""

    language: str
    namespace: str
    path: str
    written: bool = False
    skipped_empty: bool = False

    model_config = {"frozen": True}


class SyncReport(BaseModel):
    """Aggregate report for a full sync run."""

    project_id: str
    version: str
    reference_language: str
    format: str
    dry_run: bool = False
    languages: list[str] = []
    namespaces: list[NamespaceSyncResult] = []
    pulled: list[PulledNamespace] = []
    removed_languages: list[str] = []
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    @property
    def something_changed(self) -> bool:
        """True when any namespace had a non-empty update payload."""
        return any(r.has_changes for r in self.namespaces)

    @property
    def pushed(self) -> list[NamespaceSyncResult]:
        return [r for r in self.namespaces if r.pushed]

    @property
    def written(self) -> list[PulledNamespace]:
        return [p for p in self.pulled if p.written]

    @property
    def skipped_empty(self) -> list[PulledNamespace]:
        return [p for p in self.pulled if p.skipped_empty]

    def summary(self) -> str:
        """Format a short human-readable summary of the sync run."""
        added = sum(len(r.diff.to_add) for r in self.namespaces)
        removed = sum(len(r.diff.to_remove) for r in self.namespaces)
        updated = sum(len(r.diff.to_update) for r in self.namespaces)
        lines = [
            f"Sync report for project '{self.project_id}' ({self.version})"
            + (" (dry run)" if self.dry_run else ""),
            f"  Languages:      {len(self.languages)}",
            f"  Namespaces:     {len(self.namespaces)}",
            f"  Keys added:     {added}",
            f"  Keys removed:   {removed}",
            f"  Keys changed:   {updated}",
            f"  Files written:  {len(self.written)}",
            f"  Skipped empty:  {len(self.skipped_empty)}",
        ]
        return "\n".join(lines)
