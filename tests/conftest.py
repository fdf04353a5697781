"""Shared pytest fixtures for locale-sync tests."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from unittest.mock import Mock

import pytest

from locale_sync.config import SyncOptions
from locale_sync.sync.models import RemoteBlob

LAST_MODIFIED = datetime(2026, 1, 1, tzinfo=timezone.utc)


class FakeRemoteClient:
    """Minimal RemoteClient replacement for testing.

    Simulates the remote store with an in-memory dict keyed by
    (language, namespace). Pushes are recorded and applied.
    """

    def __init__(
        self,
        languages: Dict[str, dict],
        store: Optional[Dict[Tuple[str, str], dict]] = None,
        project_id: str = "proj",
        version: str = "latest",
        is_private: bool = False,
    ) -> None:
        self.languages = languages
        self.store: Dict[Tuple[str, str], dict] = {
            k: dict(v) for k, v in (store or {}).items()
        }
        self.project_id = project_id
        self.version = version
        self.is_private = is_private
        self.push_calls: List[Tuple[str, str, dict]] = []
        self.fetch_calls: List[Tuple[str, str, bool]] = []

    def list_languages(self) -> Dict[str, dict]:
        return dict(self.languages)

    def list_blobs(self) -> List[RemoteBlob]:
        prefix = f"{self.project_id}/{self.version}"
        if self.is_private:
            prefix = f"private/{prefix}"
        return [
            RemoteBlob(
                key=f"{prefix}/{lng}/{ns}",
                language=lng,
                namespace=ns,
                last_modified=LAST_MODIFIED,
                is_private=self.is_private,
            )
            for (lng, ns) in sorted(self.store)
        ]

    def fetch_namespace(
        self, language: str, namespace: str, is_private: bool = False
    ):
        self.fetch_calls.append((language, namespace, is_private))
        if (language, namespace) not in self.store:
            return {}, None
        return dict(self.store[(language, namespace)]), LAST_MODIFIED

    def push_changes(
        self, language: str, namespace: str, payload: dict
    ) -> None:
        self.push_calls.append((language, namespace, dict(payload)))
        content = self.store.setdefault((language, namespace), {})
        for key, value in payload.items():
            if value is None:
                content.pop(key, None)
            else:
                content[key] = value


@pytest.fixture
def locales_dir(tmp_path: Path) -> Path:
    return tmp_path / "locales"


@pytest.fixture
def sync_options(locales_dir: Path) -> SyncOptions:
    """SyncOptions pointing at a temporary tree, without settle delay."""
    return SyncOptions(
        project_id="proj",
        api_key="secret",
        path=str(locales_dir),
        reference_language="en",
        settle_delay=0,
    )


@pytest.fixture
def write_json():
    """Factory fixture writing a JSON namespace file."""

    def _write(path: Path, data: dict) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def mock_response():
    """Factory fixture for creating requests.Response mocks."""

    def _create_response(
        status_code=200, body=None, reason="OK", headers=None
    ):
        response = Mock()
        response.status_code = status_code
        response.reason = reason
        response.headers = headers or {}
        if body is None:
            response.content = b""
            response.json.side_effect = ValueError("no body")
        else:
            raw = body if isinstance(body, (bytes, str)) else json.dumps(body)
            response.content = raw.encode() if isinstance(raw, str) else raw
            if isinstance(body, (dict, list)):
                response.json.return_value = body
            else:
                response.json.side_effect = ValueError("not json")
        return response

    return _create_response


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep LOCALE_SYNC_* variables from the developer shell out of tests."""
    for key in list(os.environ):
        if key.startswith("LOCALE_SYNC_") or key == "LOG_LEVEL":
            monkeypatch.delenv(key, raising=False)
