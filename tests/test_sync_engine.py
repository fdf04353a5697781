"""Tests for the sync engine, driven by an in-memory remote store."""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import FakeRemoteClient
from locale_sync.errors import InvalidFormatError, RemoteError
from locale_sync.formats import get_codec
from locale_sync.sync.engine import SyncEngine, sync

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

LANGUAGES = {"en": {"isReferenceLanguage": True}, "de": {}, "fr": {}}


def _read(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


async def _run(options, client):
    return await SyncEngine(client, options).run()


# ---------------------------------------------------------------------------
# Push scenarios
# ---------------------------------------------------------------------------


class TestPush:
    async def test_new_local_key_is_pushed(self, sync_options, locales_dir, write_json):
        write_json(locales_dir / "en" / "common.json", {"greeting": "hi"})
        client = FakeRemoteClient(LANGUAGES, {("en", "common"): {}})

        report = await _run(sync_options, client)

        assert client.push_calls == [("en", "common", {"greeting": "hi"})]
        result = report.namespaces[0]
        assert result.diff.to_add == ["greeting"]
        assert result.pushed
        assert result.propagated_to == []
        assert report.something_changed

    async def test_removed_key_is_propagated(self, sync_options, locales_dir, write_json):
        write_json(locales_dir / "en" / "common.json", {})
        client = FakeRemoteClient(
            LANGUAGES,
            {
                ("en", "common"): {"greeting": "hi"},
                ("de", "common"): {"greeting": "hallo"},
                ("fr", "common"): {"greeting": "salut"},
            },
        )

        report = await _run(sync_options, client)

        assert ("en", "common", {"greeting": None}) in client.push_calls
        assert ("de", "common", {"greeting": None}) in client.push_calls
        assert ("fr", "common", {"greeting": None}) in client.push_calls
        assert len(client.push_calls) == 3
        assert sorted(report.namespaces[0].propagated_to) == ["de", "fr"]
        # Pulled files reflect the removal everywhere
        assert _read(locales_dir / "de" / "common.json") == {}

    async def test_propagation_carries_removals_only(self, sync_options, locales_dir, write_json):
        write_json(locales_dir / "en" / "common.json", {"new": "N"})
        client = FakeRemoteClient(
            {"en": {}, "de": {}}, {("en", "common"): {"old": "O"}}
        )

        await _run(sync_options, client)

        assert ("en", "common", {"old": None, "new": "N"}) in client.push_calls
        assert ("de", "common", {"old": None}) in client.push_calls

    async def test_changed_values_need_update_values(self, sync_options, locales_dir, write_json):
        write_json(locales_dir / "en" / "common.json", {"title": "New"})
        client = FakeRemoteClient(LANGUAGES, {("en", "common"): {"title": "Old"}})

        report = await _run(sync_options, client)

        assert client.push_calls == []
        assert report.namespaces[0].diff.to_update == ["title"]
        assert not report.something_changed
        # The pull overwrote the local edit with the remote value
        assert _read(locales_dir / "en" / "common.json") == {"title": "Old"}

    async def test_update_values_pushes_changed_values(self, sync_options, locales_dir, write_json):
        options = dataclasses.replace(sync_options, update_values=True)
        write_json(locales_dir / "en" / "common.json", {"title": "New"})
        client = FakeRemoteClient(LANGUAGES, {("en", "common"): {"title": "Old"}})

        with patch("locale_sync.sync.engine.asyncio.sleep") as mock_sleep:
            report = await _run(dataclasses.replace(options, settle_delay=2), client)

        assert client.push_calls == [("en", "common", {"title": "New"})]
        # A value-only push still waits before pulling
        assert report.something_changed
        mock_sleep.assert_awaited_once_with(2)
        assert _read(locales_dir / "en" / "common.json") == {"title": "New"}

    async def test_nothing_to_update(self, sync_options, locales_dir, write_json, caplog):
        write_json(locales_dir / "en" / "common.json", {"a": "1"})
        client = FakeRemoteClient(LANGUAGES, {("en", "common"): {"a": "1"}})

        with caplog.at_level(logging.INFO, logger="locale_sync.sync.engine"):
            report = await _run(sync_options, client)

        assert client.push_calls == []
        assert not report.something_changed
        assert "nothing to update for common" in caplog.text
        assert "syncing..." not in caplog.text
        assert "FINISHED" in caplog.text

    async def test_private_project_uses_private_fetch(self, sync_options, locales_dir, write_json):
        write_json(locales_dir / "en" / "common.json", {"a": "1"})
        client = FakeRemoteClient(
            {"en": {}}, {("en", "common"): {"a": "1"}}, is_private=True
        )

        await _run(sync_options, client)

        assert client.fetch_calls
        assert all(is_private for _, _, is_private in client.fetch_calls)


# ---------------------------------------------------------------------------
# Dry run
# ---------------------------------------------------------------------------


class TestDryRun:
    async def test_dry_run_pushes_and_writes_nothing(self, sync_options, locales_dir, write_json, caplog):
        write_json(locales_dir / "en" / "common.json", {"greeting": "hi"})
        client = FakeRemoteClient(LANGUAGES, {("en", "common"): {}})
        dry_options = dataclasses.replace(sync_options, dry=True)

        with caplog.at_level(logging.INFO, logger="locale_sync.sync.engine"):
            report = await _run(dry_options, client)

        assert client.push_calls == []
        assert not (locales_dir / "de").exists()
        assert report.dry_run
        assert report.written == []
        assert {(p.language, p.namespace) for p in report.pulled} == {
            ("en", "common"),
            ("de", "common"),
            ("fr", "common"),
        }
        assert "would add greeting in common..." in caplog.text

    async def test_dry_run_diff_matches_real_run(self, sync_options, locales_dir, write_json):
        write_json(locales_dir / "en" / "common.json", {"greeting": "hi", "a": "1"})
        store = {("en", "common"): {"a": "2", "gone": "x"}}

        dry = await _run(
            dataclasses.replace(sync_options, dry=True),
            FakeRemoteClient(LANGUAGES, store),
        )
        real = await _run(sync_options, FakeRemoteClient(LANGUAGES, store))

        assert dry.namespaces[0].diff == real.namespaces[0].diff
        assert dry.namespaces[0].payload_size == real.namespaces[0].payload_size

    async def test_dry_run_keeps_stale_folders(self, sync_options, locales_dir):
        (locales_dir / "xx").mkdir(parents=True)
        client = FakeRemoteClient(LANGUAGES, {("en", "common"): {"a": "1"}})

        report = await _run(dataclasses.replace(sync_options, dry=True), client)

        assert (locales_dir / "xx").is_dir()
        assert report.removed_languages == []


# ---------------------------------------------------------------------------
# Pull
# ---------------------------------------------------------------------------


class TestPull:
    async def test_first_sync_pulls_everything(self, sync_options, locales_dir):
        client = FakeRemoteClient(
            LANGUAGES,
            {
                ("en", "common"): {"nav.home": "Home"},
                ("de", "common"): {"nav.home": "Start"},
            },
        )

        report = await _run(sync_options, client)

        assert client.push_calls == []
        assert report.namespaces == []
        assert _read(locales_dir / "en" / "common.json") == {"nav": {"home": "Home"}}
        assert _read(locales_dir / "de" / "common.json") == {"nav": {"home": "Start"}}

    async def test_missing_namespace_gets_placeholder(self, sync_options, locales_dir, caplog):
        client = FakeRemoteClient(LANGUAGES, {("en", "common"): {"a": "1"}})

        with caplog.at_level(logging.DEBUG, logger="locale_sync.sync.engine"):
            report = await _run(sync_options, client)

        assert "fr/common is not in the remote listing, creating it" in caplog.text
        assert "en/common is not in the remote listing" not in caplog.text
        assert _read(locales_dir / "fr" / "common.json") == {}
        assert len(report.written) == 3

    async def test_skip_empty(self, sync_options, locales_dir):
        options = dataclasses.replace(sync_options, skip_empty=True)
        client = FakeRemoteClient(
            LANGUAGES,
            {("en", "common"): {"a": "1"}, ("de", "common"): {}},
        )

        report = await _run(options, client)

        assert not (locales_dir / "de" / "common.json").exists()
        assert not (locales_dir / "fr" / "common.json").exists()
        assert (locales_dir / "de").is_dir()
        assert {(p.language, p.namespace) for p in report.skipped_empty} == {
            ("de", "common"),
            ("fr", "common"),
        }

    async def test_stale_language_folder_removed(self, sync_options, locales_dir, write_json):
        write_json(locales_dir / "xx" / "common.json", {"a": "1"})
        client = FakeRemoteClient(LANGUAGES, {("en", "common"): {"a": "1"}})

        report = await _run(sync_options, client)

        assert report.removed_languages == ["xx"]
        assert not (locales_dir / "xx").exists()

    async def test_other_format(self, sync_options, locales_dir):
        options = dataclasses.replace(sync_options, format="yaml-rails")
        client = FakeRemoteClient({"de": {}}, {("de", "common"): {"a.b": "c"}})

        await _run(dataclasses.replace(options, reference_language="de"), client)

        text = (locales_dir / "de" / "common.yaml").read_text(encoding="utf-8")
        assert text.startswith("de:\n  common:\n")

    async def test_spreadsheet_reference_is_pushed(self, sync_options, locales_dir):
        options = dataclasses.replace(sync_options, format="xlsx")
        codec = get_codec("xlsx")
        local = locales_dir / "en" / "common.xlsx"
        local.parent.mkdir(parents=True)
        local.write_bytes(
            codec.encode({"a": "1", "b": "2"}, language="en", namespace="common")
        )
        client = FakeRemoteClient(LANGUAGES, {("en", "common"): {"a": "1"}})

        await _run(options, client)

        assert ("en", "common", {"b": "2"}) in client.push_calls
        written = (locales_dir / "de" / "common.xlsx").read_bytes()
        assert codec.decode(written, "de") == {}
        assert codec.decode(local.read_bytes(), "en") == {"a": "1", "b": "2"}

    async def test_omit_reference_when_unchanged(self, sync_options, locales_dir, write_json):
        options = dataclasses.replace(sync_options, omit_reference=True)
        local = write_json(locales_dir / "en" / "common.json", {"a": "local"})
        local.write_text('{"a": "local"}  ', encoding="utf-8")
        client = FakeRemoteClient(
            LANGUAGES,
            {("en", "common"): {"a": "local"}, ("de", "common"): {"a": "x"}},
        )

        report = await _run(options, client)

        assert "en" not in {p.language for p in report.pulled}
        assert local.read_text(encoding="utf-8") == '{"a": "local"}  '

    async def test_omit_reference_ignored_after_push(self, sync_options, locales_dir, write_json):
        options = dataclasses.replace(sync_options, omit_reference=True)
        write_json(locales_dir / "en" / "common.json", {"a": "1", "b": "2"})
        client = FakeRemoteClient(LANGUAGES, {("en", "common"): {"a": "1"}})

        report = await _run(options, client)

        assert "en" in {p.language for p in report.pulled}


# ---------------------------------------------------------------------------
# Stages and errors
# ---------------------------------------------------------------------------


class TestStages:
    async def test_reference_language_from_remote(self, sync_options, locales_dir, write_json):
        options = dataclasses.replace(sync_options, reference_language=None)
        write_json(locales_dir / "de" / "common.json", {"a": "1"})
        client = FakeRemoteClient(
            {"en": {}, "de": {"isReferenceLanguage": True}}, {}
        )

        report = await _run(options, client)

        assert report.reference_language == "de"
        assert client.push_calls == [("de", "common", {"a": "1"})]

    async def test_reference_language_defaults_to_first(self, sync_options):
        options = dataclasses.replace(sync_options, reference_language=None)
        client = FakeRemoteClient({"fr": {}, "en": {}}, {})

        report = await _run(options, client)

        assert report.reference_language == "fr"

    async def test_settle_delay_only_after_changes(self, sync_options, locales_dir, write_json):
        options = dataclasses.replace(sync_options, settle_delay=5)
        write_json(locales_dir / "en" / "common.json", {"new": "x"})
        client = FakeRemoteClient(LANGUAGES, {("en", "common"): {}})

        with patch("locale_sync.sync.engine.asyncio.sleep") as mock_sleep:
            await _run(options, client)
            mock_sleep.assert_awaited_once_with(5)

            mock_sleep.reset_mock()
            await _run(options, client)
            mock_sleep.assert_not_awaited()

    async def test_clean_empties_root_first(self, sync_options, locales_dir, write_json):
        write_json(locales_dir / "en" / "common.json", {"local": "only"})
        client = FakeRemoteClient(LANGUAGES, {("en", "common"): {"a": "1"}})

        await _run(dataclasses.replace(sync_options, clean=True), client)

        # Nothing was read locally, so nothing was removed remotely
        assert client.push_calls == []
        assert _read(locales_dir / "en" / "common.json") == {"a": "1"}

    async def test_invalid_format_before_any_io(self, sync_options, locales_dir):
        client = FakeRemoteClient(LANGUAGES, {})

        with pytest.raises(InvalidFormatError, match="docx is not a valid format!"):
            await _run(dataclasses.replace(sync_options, format="docx"), client)

        assert not locales_dir.exists()
        assert client.fetch_calls == []

    async def test_push_failure_aborts_before_pull(self, sync_options, locales_dir, write_json):
        write_json(locales_dir / "en" / "common.json", {"new": "x"})
        client = FakeRemoteClient(LANGUAGES, {("en", "common"): {}})

        def _fail(*args, **kwargs):
            raise RemoteError("Forbidden (403)", 403)

        client.push_changes = _fail

        with pytest.raises(RemoteError, match="Forbidden"):
            await _run(sync_options, client)

        assert not (locales_dir / "de").exists()

    async def test_sync_function_uses_given_client(self, sync_options):
        client = FakeRemoteClient({"en": {}}, {("en", "common"): {"a": "1"}})

        report = await sync(sync_options, client)

        assert report.project_id == "proj"
        assert report.completed_at is not None

    async def test_placeholder_pull_over_http_tolerates_not_found_body(
        self, sync_options, locales_dir, mock_response
    ):
        options = dataclasses.replace(
            sync_options, api_path="https://api.example.com"
        )

        def _respond(method, url, **kwargs):
            if url.endswith("/languages/proj"):
                return mock_response(
                    body={"en": {"isReferenceLanguage": True}, "de": {}}
                )
            if url.endswith("/download/proj/latest"):
                return mock_response(
                    body=[
                        {
                            "key": "proj/latest/en/common",
                            "lastModified": "2026-01-01T00:00:00Z",
                        }
                    ]
                )
            if url.endswith("/proj/latest/en/common"):
                return mock_response(body={"a": "1"})
            return mock_response(
                status_code=404, body={"message": "Not Found"}, reason="Not Found"
            )

        with patch(
            "locale_sync.core.client.requests.Session.request",
            side_effect=_respond,
        ):
            report = await sync(options)

        assert _read(locales_dir / "en" / "common.json") == {"a": "1"}
        assert _read(locales_dir / "de" / "common.json") == {}
        assert len(report.written) == 2
