"""CSV codec: one row per key with a ``key`` column and one column per language."""

from __future__ import annotations

import csv
import io
from datetime import datetime

from .common import Codec, NamespaceContent, decode_text


class CsvCodec(Codec):
    def decode(self, data: bytes, language: str) -> NamespaceContent:
        reader = csv.DictReader(io.StringIO(decode_text(data)))
        if reader.fieldnames is not None and "key" not in reader.fieldnames:
            raise ValueError("missing 'key' column")
        result: NamespaceContent = {}
        for row in reader:
            key = row.get("key")
            value = row.get(language)
            if key and isinstance(value, str):
                result[key] = value
        return result

    def encode(
        self,
        content: NamespaceContent,
        *,
        language: str,
        namespace: str,
        last_modified: datetime | None = None,
    ) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["key", language])
        for key, value in content.items():
            writer.writerow([key, value or ""])
        return buffer.getvalue().encode("utf-8")
