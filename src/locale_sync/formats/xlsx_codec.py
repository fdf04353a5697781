"""Excel codec: the first worksheet holds a ``key`` column and one column per language."""

from __future__ import annotations

import io
from datetime import datetime

from openpyxl import Workbook, load_workbook

from .common import Codec, NamespaceContent


class XlsxCodec(Codec):
    def decode(self, data: bytes, language: str) -> NamespaceContent:
        if not data:
            return {}
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        try:
            rows = workbook.worksheets[0].iter_rows(values_only=True)
            header = next(rows, None)
            if not header:
                return {}
            columns = [str(c) if c is not None else "" for c in header]
            if "key" not in columns:
                raise ValueError("missing 'key' column")
            if language not in columns:
                return {}
            key_index = columns.index("key")
            value_index = columns.index(language)

            result: NamespaceContent = {}
            for row in rows:
                key = row[key_index] if key_index < len(row) else None
                value = row[value_index] if value_index < len(row) else None
                # Only text cells count, as with CSV
                if key and isinstance(value, str):
                    result[str(key)] = value
            return result
        finally:
            workbook.close()

    def encode(
        self,
        content: NamespaceContent,
        *,
        language: str,
        namespace: str,
        last_modified: datetime | None = None,
    ) -> bytes:
        workbook = Workbook()
        sheet = workbook.active
        sheet.append(["key", language])
        for row, (key, value) in enumerate(content.items(), start=2):
            sheet.cell(row=row, column=1, value=key).data_type = "s"
            sheet.cell(row=row, column=2, value=value or "").data_type = "s"
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()
