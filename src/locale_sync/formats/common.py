"""Shared types and helpers for the format codecs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from charset_normalizer import from_bytes

NamespaceContent = dict[str, str | None]

KEY_SEPARATOR = "."

# =============================================================================
# Flattening
# =============================================================================


def flatten(data: Any, separator: str = KEY_SEPARATOR) -> NamespaceContent:
    """Flatten nested dicts/lists into a single level of dotted keys.

    List items become index segments (``items.0``). Scalars other than
    strings are converted with ``str()``; ``None`` stays ``None``. A
    non-container value at the root yields an empty mapping.
    """
    result: NamespaceContent = {}

    def _walk(value: Any, prefix: str) -> None:
        if isinstance(value, dict):
            if not value and prefix:
                return
            for key, child in value.items():
                _walk(child, f"{prefix}{separator}{key}" if prefix else str(key))
        elif isinstance(value, list):
            for index, child in enumerate(value):
                _walk(child, f"{prefix}{separator}{index}" if prefix else str(index))
        elif prefix:
            if value is None or isinstance(value, str):
                result[prefix] = value
            elif isinstance(value, bool):
                result[prefix] = "true" if value else "false"
            else:
                result[prefix] = str(value)

    if isinstance(data, (dict, list)):
        _walk(data, "")
    return result


def unflatten(
    content: NamespaceContent, separator: str = KEY_SEPARATOR
) -> dict[str, Any]:
    """Rebuild a nested dict from dotted keys.

    When a key is both a leaf and the prefix of another key (``a`` and
    ``a.b``) the longer key is kept flat at the deepest level that still
    holds a dict, so no value is lost.
    """
    nested: dict[str, Any] = {}
    for key in sorted(content, key=lambda k: k.count(separator)):
        value = content[key]
        parts = key.split(separator)
        node = nested
        for depth, part in enumerate(parts[:-1]):
            if part not in node:
                node[part] = {}
            child = node[part]
            if not isinstance(child, dict):
                node[separator.join(parts[depth:])] = value
                break
            node = child
        else:
            node[parts[-1]] = value
    return nested


# =============================================================================
# Text decoding
# =============================================================================


def decode_text(data: bytes) -> str:
    """Decode raw file bytes to text.

    UTF-8 (with or without BOM) is tried first; anything else goes
    through charset-normalizer. Windows line endings become ``\\n``.
    """
    if not data:
        return ""
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        best = from_bytes(data).best()
        if best is None:
            text = data.decode("utf-8", errors="replace")
        else:
            text = str(best)
    return text.replace("\r\n", "\n")


# =============================================================================
# Codec interface
# =============================================================================


class Codec(ABC):
    """Transcoder between file bytes and a flat key/value mapping.

    Codecs are stateless; one instance serves every run. Decoding errors
    are raised as-is and annotated with path and format by the caller.
    """

    @abstractmethod
    def decode(self, data: bytes, language: str) -> NamespaceContent:
        """Parse file bytes into a flat mapping for *language*."""

    @abstractmethod
    def encode(
        self,
        content: NamespaceContent,
        *,
        language: str,
        namespace: str,
        last_modified: datetime | None = None,
    ) -> bytes:
        """Render a flat mapping as file bytes."""
