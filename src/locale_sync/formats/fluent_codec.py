"""Fluent (``.ftl``) codec.

Messages map to their id, attributes to ``<id>.<attribute>`` and terms to
``-<id>``. Comments are dropped. Placeables other than string literals
are kept in Fluent syntax so variables survive a round trip.
"""

from __future__ import annotations

import re
from datetime import datetime

from fluent.syntax import FluentParser, FluentSerializer, ast
from fluent.syntax.serializer import serialize_placeable

from .common import Codec, NamespaceContent, decode_text

_IDENTIFIER_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9_-]*")


def _pattern_text(pattern: ast.Pattern | None) -> str:
    if pattern is None:
        return ""
    parts: list[str] = []
    for element in pattern.elements:
        if isinstance(element, ast.TextElement):
            parts.append(element.value)
        elif isinstance(element.expression, ast.StringLiteral):
            parts.append(element.expression.parse()["value"])
        else:
            parts.append(serialize_placeable(element))
    return "".join(parts)


def _literal_pattern(text: str) -> ast.Pattern:
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\u000A")
    )
    return ast.Pattern([ast.Placeable(ast.StringLiteral(escaped))])


class FluentCodec(Codec):
    def __init__(self) -> None:
        self._parser = FluentParser()
        self._serializer = FluentSerializer()

    def decode(self, data: bytes, language: str) -> NamespaceContent:
        source = decode_text(data)
        resource = self._parser.parse(source)
        result: NamespaceContent = {}
        for entry in resource.body:
            if isinstance(entry, ast.Junk):
                reason = entry.annotations[0].message if entry.annotations else ""
                raise ValueError(f"unparsable entry {entry.content.strip()!r}: {reason}")
            if isinstance(entry, ast.Message):
                if entry.value is not None:
                    result[entry.id.name] = _pattern_text(entry.value)
                for attribute in entry.attributes:
                    result[f"{entry.id.name}.{attribute.id.name}"] = _pattern_text(
                        attribute.value
                    )
            elif isinstance(entry, ast.Term):
                result[f"-{entry.id.name}"] = _pattern_text(entry.value)
        return result

    def _pattern(self, text: str) -> ast.Pattern:
        """Parse *text* as a Fluent pattern, or quote it when that is lossy."""
        source = "k = " + text.replace("\n", "\n    ") + "\n"
        entry = self._parser.parse_entry(source)
        if (
            isinstance(entry, ast.Message)
            and entry.value is not None
            and _pattern_text(entry.value) == text
        ):
            return entry.value
        return _literal_pattern(text)

    def encode(
        self,
        content: NamespaceContent,
        *,
        language: str,
        namespace: str,
        last_modified: datetime | None = None,
    ) -> bytes:
        entries: dict[str, ast.Message | ast.Term] = {}
        for key, value in content.items():
            pattern = self._pattern(value or "")
            if key.startswith("-") and _IDENTIFIER_RE.fullmatch(key[1:]):
                entries[key] = ast.Term(ast.Identifier(key[1:]), pattern)
                continue
            if _IDENTIFIER_RE.fullmatch(key):
                message = entries.setdefault(
                    key, ast.Message(ast.Identifier(key))
                )
                message.value = pattern
                continue
            message_id, _, attribute_id = key.partition(".")
            if not (
                _IDENTIFIER_RE.fullmatch(message_id)
                and _IDENTIFIER_RE.fullmatch(attribute_id)
            ):
                raise ValueError(f"'{key}' is not a valid Fluent identifier")
            message = entries.setdefault(
                message_id, ast.Message(ast.Identifier(message_id))
            )
            message.attributes.append(
                ast.Attribute(ast.Identifier(attribute_id), pattern)
            )

        resource = ast.Resource(list(entries.values()))
        return self._serializer.serialize(resource).encode("utf-8")
