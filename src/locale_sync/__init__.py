"""Synchronise a local tree of translation files with a remote translation service."""

__version__ = "1.0.0"
