"""XML-based codecs: Android string resources, XLIFF 1.2/2.0, RESX and TMX.

Documents are parsed with defusedxml, so DTD entity declarations are
rejected; output is built and serialised with the stdlib ElementTree.
Tag names are compared by their local part so documents with or without
a default namespace both work.
"""

from __future__ import annotations

import re
from datetime import datetime
from xml.etree import ElementTree as ET

from defusedxml import ElementTree as DET

from .common import Codec, NamespaceContent

XML_NS = "http://www.w3.org/XML/1998/namespace"
XLIFF12_NS = "urn:oasis:names:tc:xliff:document:1.2"
XLIFF2_NS = "urn:oasis:names:tc:xliff:document:2.0"


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _parse(data: bytes) -> ET.Element:
    return DET.fromstring(data)


def _text(element: ET.Element | None) -> str:
    if element is None:
        return ""
    return "".join(element.itertext())


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local(child.tag) == name]


def _descendants(element: ET.Element, name: str) -> list[ET.Element]:
    return [node for node in element.iter() if _local(node.tag) == name]


def _serialize(root: ET.Element) -> bytes:
    ET.indent(root)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True) + b"\n"


# =============================================================================
# Android
# =============================================================================

_ANDROID_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)
_ANDROID_UNESCAPES = {"n": "\n", "t": "\t"}


def _android_unescape(value: str) -> str:
    def _replace(match: re.Match) -> str:
        token = match.group(1)
        if len(token) == 5 and token.startswith("u"):
            return chr(int(token[1:], 16))
        return _ANDROID_UNESCAPES.get(token, token)

    return _ANDROID_ESCAPE_RE.sub(_replace, value)


def _android_escape(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\t", "\\t")
    )
    if escaped.startswith(("@", "?")):
        escaped = "\\" + escaped
    return escaped


class AndroidCodec(Codec):
    """``res/values/strings.xml`` style resources (``<string name=...>``)."""

    def decode(self, data: bytes, language: str) -> NamespaceContent:
        root = _parse(data)
        return {
            node.attrib["name"]: _android_unescape(_text(node))
            for node in _children(root, "string")
            if "name" in node.attrib
        }

    def encode(
        self,
        content: NamespaceContent,
        *,
        language: str,
        namespace: str,
        last_modified: datetime | None = None,
    ) -> bytes:
        root = ET.Element("resources")
        for key, value in content.items():
            node = ET.SubElement(root, "string", {"name": key})
            node.text = _android_escape(value or "")
        return _serialize(root)


# =============================================================================
# XLIFF
# =============================================================================


def _source_or_target(container: ET.Element) -> str:
    targets = _children(container, "target")
    if targets:
        return _text(targets[0])
    return _text(next(iter(_children(container, "source")), None))


class Xliff12Codec(Codec):
    """XLIFF 1.2: ``<trans-unit id=...>`` with source and target."""

    def decode(self, data: bytes, language: str) -> NamespaceContent:
        root = _parse(data)
        result: NamespaceContent = {}
        for unit in _descendants(root, "trans-unit"):
            key = unit.get("resname") or unit.get("id")
            if key:
                result[key] = _source_or_target(unit)
        return result

    def encode(
        self,
        content: NamespaceContent,
        *,
        language: str,
        namespace: str,
        last_modified: datetime | None = None,
    ) -> bytes:
        root = ET.Element("xliff", {"xmlns": XLIFF12_NS, "version": "1.2"})
        file_node = ET.SubElement(
            root,
            "file",
            {
                "original": namespace,
                "datatype": "plaintext",
                "source-language": language,
                "target-language": language,
            },
        )
        body = ET.SubElement(file_node, "body")
        for key, value in content.items():
            unit = ET.SubElement(body, "trans-unit", {"id": key})
            ET.SubElement(unit, "source").text = value or ""
            ET.SubElement(unit, "target").text = value or ""
        return _serialize(root)


class Xliff2Codec(Codec):
    """XLIFF 2.0: ``<unit id=...>`` with one or more segments."""

    def decode(self, data: bytes, language: str) -> NamespaceContent:
        root = _parse(data)
        result: NamespaceContent = {}
        for unit in _descendants(root, "unit"):
            key = unit.get("id")
            if not key:
                continue
            segments = _children(unit, "segment")
            result[key] = "".join(_source_or_target(s) for s in segments)
        return result

    def encode(
        self,
        content: NamespaceContent,
        *,
        language: str,
        namespace: str,
        last_modified: datetime | None = None,
    ) -> bytes:
        root = ET.Element(
            "xliff",
            {
                "xmlns": XLIFF2_NS,
                "version": "2.0",
                "srcLang": language,
                "trgLang": language,
            },
        )
        file_node = ET.SubElement(root, "file", {"id": namespace})
        for key, value in content.items():
            unit = ET.SubElement(file_node, "unit", {"id": key})
            segment = ET.SubElement(unit, "segment")
            ET.SubElement(segment, "source").text = value or ""
            ET.SubElement(segment, "target").text = value or ""
        return _serialize(root)


# =============================================================================
# RESX
# =============================================================================

_RESX_HEADERS = (
    ("resmimetype", "text/microsoft-resx"),
    ("version", "2.0"),
    (
        "reader",
        "System.Resources.ResXResourceReader, System.Windows.Forms, "
        "Version=4.0.0.0, Culture=neutral, PublicKeyToken=b77a5c561934e089",
    ),
    (
        "writer",
        "System.Resources.ResXResourceWriter, System.Windows.Forms, "
        "Version=4.0.0.0, Culture=neutral, PublicKeyToken=b77a5c561934e089",
    ),
)


class ResxCodec(Codec):
    """.NET resource files (``<data name=...><value>``)."""

    def decode(self, data: bytes, language: str) -> NamespaceContent:
        root = _parse(data)
        result: NamespaceContent = {}
        for node in _children(root, "data"):
            key = node.get("name")
            if key and not node.get("type"):
                result[key] = _text(next(iter(_children(node, "value")), None))
        return result

    def encode(
        self,
        content: NamespaceContent,
        *,
        language: str,
        namespace: str,
        last_modified: datetime | None = None,
    ) -> bytes:
        root = ET.Element("root")
        for name, value in _RESX_HEADERS:
            header = ET.SubElement(root, "resheader", {"name": name})
            ET.SubElement(header, "value").text = value
        for key, value in content.items():
            node = ET.SubElement(
                root, "data", {"name": key, f"{{{XML_NS}}}space": "preserve"}
            )
            ET.SubElement(node, "value").text = value or ""
        return _serialize(root)


# =============================================================================
# TMX
# =============================================================================


class TmxCodec(Codec):
    """Translation memory exchange; reads the variant for the given language."""

    def decode(self, data: bytes, language: str) -> NamespaceContent:
        root = _parse(data)
        wanted = language.lower()
        result: NamespaceContent = {}
        for unit in _descendants(root, "tu"):
            key = unit.get("tuid")
            if not key:
                continue
            for variant in _children(unit, "tuv"):
                lang = variant.get(f"{{{XML_NS}}}lang") or variant.get("lang")
                if lang and lang.lower() == wanted:
                    result[key] = _text(
                        next(iter(_children(variant, "seg")), None)
                    )
                    break
        return result

    def encode(
        self,
        content: NamespaceContent,
        *,
        language: str,
        namespace: str,
        last_modified: datetime | None = None,
    ) -> bytes:
        root = ET.Element("tmx", {"version": "1.4"})
        ET.SubElement(
            root,
            "header",
            {
                "creationtool": "locale-sync",
                "creationtoolversion": "1.0",
                "datatype": "plaintext",
                "segtype": "sentence",
                "adminlang": language,
                "srclang": language,
                "o-tmf": namespace,
            },
        )
        body = ET.SubElement(root, "body")
        for key, value in content.items():
            unit = ET.SubElement(body, "tu", {"tuid": key})
            variant = ET.SubElement(unit, "tuv", {f"{{{XML_NS}}}lang": language})
            ET.SubElement(variant, "seg").text = value or ""
        return _serialize(root)
