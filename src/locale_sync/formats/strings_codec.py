"""Apple ``.strings`` codec (``"key" = "value";`` pairs)."""

from __future__ import annotations

import re
from datetime import datetime

from .common import Codec, NamespaceContent, decode_text

_TOKEN_RE = re.compile(
    r"/\*.*?\*/|//[^\n]*|"
    r'"(?P<key>(?:\\.|[^"\\])*)"\s*=\s*"(?P<value>(?:\\.|[^"\\])*)"\s*;',
    re.DOTALL,
)
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_UNESCAPES = {"n": "\n", "t": "\t", "r": "\r"}


def _unescape(value: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _UNESCAPES.get(m.group(1), m.group(1)), value)


def _escape(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )


class StringsCodec(Codec):
    def decode(self, data: bytes, language: str) -> NamespaceContent:
        # Comments are matched as tokens too, so pairs inside them are skipped
        return {
            _unescape(m.group("key")): _unescape(m.group("value"))
            for m in _TOKEN_RE.finditer(decode_text(data))
            if m.group("key") is not None
        }

    def encode(
        self,
        content: NamespaceContent,
        *,
        language: str,
        namespace: str,
        last_modified: datetime | None = None,
    ) -> bytes:
        lines = [
            f'"{_escape(key)}" = "{_escape(value or "")}";'
            for key, value in content.items()
        ]
        return ("\n".join(lines) + "\n" if lines else "").encode("utf-8")
