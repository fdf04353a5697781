"""JSON codecs: nested i18next-style JSON and flat key/value JSON."""

from __future__ import annotations

import json
from datetime import datetime

from .common import Codec, NamespaceContent, decode_text, flatten, unflatten


class JsonCodec(Codec):
    """JSON object per namespace.

    Args:
        nested: Write dotted keys as nested objects (``json``) or keep
            them flat (``flat``). Both variants flatten on decode.
    """

    def __init__(self, nested: bool = True) -> None:
        self.nested = nested

    def decode(self, data: bytes, language: str) -> NamespaceContent:
        text = decode_text(data)
        if not text.strip():
            return {}
        parsed = json.loads(text)
        if not isinstance(parsed, dict):
            raise ValueError(
                f"expected a JSON object, got {type(parsed).__name__}"
            )
        return flatten(parsed)

    def encode(
        self,
        content: NamespaceContent,
        *,
        language: str,
        namespace: str,
        last_modified: datetime | None = None,
    ) -> bytes:
        data = unflatten(content) if self.nested else dict(content)
        return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")
