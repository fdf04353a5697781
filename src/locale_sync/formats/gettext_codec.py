"""Gettext PO codec built on polib.

Keys map to ``msgid``; a ``msgctxt`` is folded into the key as
``context{CONTEXT_SEPARATOR}msgid``. Plural entries expose their forms
as ``key`` and ``key_plural`` (and ``key_plural_N`` beyond the second).
"""

from __future__ import annotations

from datetime import datetime, timezone

import polib  # type: ignore[import-untyped]

from .common import Codec, NamespaceContent, decode_text

CONTEXT_SEPARATOR = "##"


class GettextCodec(Codec):
    def decode(self, data: bytes, language: str) -> NamespaceContent:
        text = decode_text(data)
        if not text.strip():
            return {}
        po = polib.pofile(text)
        result: NamespaceContent = {}
        for entry in po:
            if entry.obsolete:
                continue
            key = entry.msgid
            if entry.msgctxt:
                key = f"{entry.msgctxt}{CONTEXT_SEPARATOR}{key}"
            if entry.msgid_plural:
                for index, form in sorted(entry.msgstr_plural.items()):
                    result[_plural_key(key, int(index))] = form
            else:
                result[key] = entry.msgstr
        return result

    def encode(
        self,
        content: NamespaceContent,
        *,
        language: str,
        namespace: str,
        last_modified: datetime | None = None,
    ) -> bytes:
        po = polib.POFile(wrapwidth=0)
        revised = last_modified or datetime.now(timezone.utc)
        po.metadata = {
            "Project-Id-Version": namespace,
            "Language": language,
            "PO-Revision-Date": revised.strftime("%Y-%m-%d %H:%M%z"),
            "MIME-Version": "1.0",
            "Content-Type": "text/plain; charset=utf-8",
            "Content-Transfer-Encoding": "8bit",
        }
        for key, value in content.items():
            context, _, msgid = key.rpartition(CONTEXT_SEPARATOR)
            po.append(
                polib.POEntry(
                    msgctxt=context or None,
                    msgid=msgid,
                    msgstr=value or "",
                )
            )
        return str(po).encode("utf-8")


def _plural_key(key: str, index: int) -> str:
    if index == 0:
        return key
    if index == 1:
        return f"{key}_plural"
    return f"{key}_plural_{index}"
