"""Per-namespace comparison of local and remote reference content."""

from __future__ import annotations

from collections.abc import Mapping

from .models import NamespaceDiff


def diff_namespace(
    local: Mapping[str, str | None] | None,
    remote: Mapping[str, str | None] | None,
) -> NamespaceDiff:
    """Compute the keys to add, update and remove for one namespace.

    - key only in *local* -> ``to_add``
    - key in both with different values -> ``to_update``
    - key only in *remote* -> ``to_remove``

    ``None`` stands for an empty namespace on either side. Key order of
    each list follows the iteration order of its source mapping.
    """
    local = local or {}
    remote = remote or {}

    to_add: list[str] = []
    to_update: list[str] = []
    for key, value in local.items():
        if key not in remote:
            to_add.append(key)
        elif remote[key] != value:
            to_update.append(key)

    to_remove = [key for key in remote if key not in local]

    return NamespaceDiff(
        to_add=to_add, to_update=to_update, to_remove=to_remove
    )


def build_payload(
    local: Mapping[str, str | None],
    diff: NamespaceDiff,
    update_values: bool = False,
) -> dict[str, str | None]:
    """Build the update payload the remote API expects for *diff*.

    Removed keys map to ``None``; added keys (and changed keys when
    *update_values* is set) map to their local value.
    """
    payload: dict[str, str | None] = {key: None for key in diff.to_remove}
    for key in diff.to_add:
        payload[key] = local.get(key)
    if update_values:
        for key in diff.to_update:
            payload[key] = local.get(key)
    return payload
