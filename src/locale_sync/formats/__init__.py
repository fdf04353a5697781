"""Format codec registry.

Every supported file format is a member of the ``Format`` enum and is
served by exactly one ``Codec``. Several formats can share an extension
(``json`` and ``flat`` are both ``.json``); the registry resolves both
directions:

- ``extension_for(format)`` -- extension written for a target format.
- ``formats_for_extension(ext)`` -- formats a file extension may hold.
"""

from __future__ import annotations

from enum import Enum

from ..errors import InvalidFormatError
from .common import Codec, NamespaceContent, decode_text, flatten, unflatten
from .csv_codec import CsvCodec
from .fluent_codec import FluentCodec
from .gettext_codec import GettextCodec
from .json_codec import JsonCodec
from .strings_codec import StringsCodec
from .xlsx_codec import XlsxCodec
from .xml_codecs import (
    AndroidCodec,
    ResxCodec,
    TmxCodec,
    Xliff2Codec,
    Xliff12Codec,
)
from .yaml_codec import YamlCodec


class Format(str, Enum):
    """Supported file formats."""

    JSON = "json"
    FLAT = "flat"
    YAML = "yaml"
    YAML_RAILS = "yaml-rails"
    PO = "po"
    GETTEXT = "gettext"
    CSV = "csv"
    XLSX = "xlsx"
    ANDROID = "android"
    STRINGS = "strings"
    XLIFF2 = "xliff2"
    XLIFF12 = "xliff12"
    XLF2 = "xlf2"
    XLF12 = "xlf12"
    RESX = "resx"
    TMX = "tmx"
    FLUENT = "fluent"


_JSON = JsonCodec(nested=True)
_GETTEXT = GettextCodec()
_XLIFF2 = Xliff2Codec()
_XLIFF12 = Xliff12Codec()

# Format -> (extension, codec). Order within an extension matters: the
# first format listed for an extension is the one reported on mismatch.
_REGISTRY: dict[Format, tuple[str, Codec]] = {
    Format.JSON: (".json", _JSON),
    Format.FLAT: (".json", JsonCodec(nested=False)),
    Format.YAML: (".yaml", YamlCodec()),
    Format.YAML_RAILS: (".yaml", YamlCodec(rails=True)),
    Format.PO: (".po", _GETTEXT),
    Format.GETTEXT: (".po", _GETTEXT),
    Format.CSV: (".csv", CsvCodec()),
    Format.XLSX: (".xlsx", XlsxCodec()),
    Format.ANDROID: (".xml", AndroidCodec()),
    Format.STRINGS: (".strings", StringsCodec()),
    Format.XLIFF2: (".xliff", _XLIFF2),
    Format.XLIFF12: (".xliff", _XLIFF12),
    Format.XLF2: (".xlf", _XLIFF2),
    Format.XLF12: (".xlf", _XLIFF12),
    Format.RESX: (".resx", ResxCodec()),
    Format.TMX: (".tmx", TmxCodec()),
    Format.FLUENT: (".ftl", FluentCodec()),
}

ACCEPTED_EXTENSIONS: frozenset[str] = frozenset(
    ext for ext, _ in _REGISTRY.values()
)


def parse_format(name: str | Format) -> Format:
    """Return the ``Format`` for *name*, raising ``InvalidFormatError``."""
    try:
        return Format(name)
    except ValueError:
        raise InvalidFormatError(str(name)) from None


def get_codec(name: str | Format) -> Codec:
    """Return the codec serving format *name*."""
    return _REGISTRY[parse_format(name)][1]


def extension_for(name: str | Format) -> str:
    """Return the file extension (with dot) written for format *name*."""
    return _REGISTRY[parse_format(name)][0]


def formats_for_extension(extension: str) -> list[Format]:
    """Return the formats stored under *extension*, in registry order."""
    return [fmt for fmt, (ext, _) in _REGISTRY.items() if ext == extension]


__all__ = [
    "ACCEPTED_EXTENSIONS",
    "Codec",
    "Format",
    "NamespaceContent",
    "decode_text",
    "extension_for",
    "flatten",
    "formats_for_extension",
    "get_codec",
    "parse_format",
    "unflatten",
]
