"""YAML codecs, plain and Rails-style (``{language: {namespace: ...}}``)."""

from __future__ import annotations

from datetime import datetime

import yaml

from .common import Codec, NamespaceContent, decode_text, flatten, unflatten


class YamlCodec(Codec):
    """YAML document per namespace.

    Args:
        rails: Wrap the namespace in ``{language: {namespace: ...}}`` as
            Rails locale files do. Decoding then reads the first namespace
            of the first language in the document.
    """

    def __init__(self, rails: bool = False) -> None:
        self.rails = rails

    def decode(self, data: bytes, language: str) -> NamespaceContent:
        parsed = yaml.safe_load(decode_text(data))
        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ValueError(
                f"expected a YAML mapping, got {type(parsed).__name__}"
            )
        if self.rails:
            parsed = _first_value(_first_value(parsed))
        return flatten(parsed)

    def encode(
        self,
        content: NamespaceContent,
        *,
        language: str,
        namespace: str,
        last_modified: datetime | None = None,
    ) -> bytes:
        data = unflatten(content)
        if self.rails:
            data = {language: {namespace: data}}
        return yaml.safe_dump(
            data,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        ).encode("utf-8")


def _first_value(mapping: object) -> object:
    if not isinstance(mapping, dict) or not mapping:
        return {}
    return next(iter(mapping.values()))
