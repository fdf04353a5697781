"""Local tree layout: ``<root>/<prefix><language>/<namespace><extension>``."""

from pathlib import Path

from ..config import SyncOptions
from ..formats import extension_for


def language_dir(options: SyncOptions, language: str) -> Path:
    return Path(options.path) / f"{options.language_folder_prefix}{language}"


def namespace_file(options: SyncOptions, language: str, namespace: str) -> Path:
    return language_dir(options, language) / (
        namespace + extension_for(options.format)
    )
