"""Tests for the editing session: load, search, renew, preview and save.

Renew goes through the real aiohttp client against a local lookup
service; save is checked with the privileged writer replaced.
"""

import asyncio
from pathlib import Path

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from hostsedit import hosts_io
from hostsedit.editor import HostsEditor, Notification
from hostsedit.records import MappingLine

SAMPLE = "127.0.0.1 localhost\n# comment\n10.0.0.5 foo.example bar.example\n"
ADDRESSES = {"foo.example": "10.9.9.1", "bar.example": "10.9.9.2"}


async def _lookup(request: web.Request) -> web.Response:
    domain = request.query.get("domain", "")
    if domain not in ADDRESSES:
        return web.json_response(
            {"ip_addresses": [], "message": "not found", "status": 404}, status=404
        )
    return web.json_response(
        {"ip_addresses": [ADDRESSES[domain]], "message": "ok", "status": 200}
    )


def _renew_with_service(editor: HostsEditor, record_id: int) -> bool:
    """Point `editor` at a local lookup service and renew one record."""

    async def _main() -> bool:
        app = web.Application()
        app.router.add_get("/lookup", _lookup)
        async with TestServer(app) as server:
            editor.endpoint = str(server.make_url("/lookup"))
            return await editor.renew(record_id)

    return asyncio.run(_main())


@pytest.fixture
def editor(tmp_path: Path) -> HostsEditor:
    path = tmp_path / "hosts"
    path.write_text(SAMPLE, encoding="utf-8")
    ed = HostsEditor(path, backup_dir=tmp_path / "backups")
    ed.load()
    return ed


def _record(editor: HostsEditor, ip: str) -> MappingLine:
    return next(m for m in editor.store.mappings() if m.ip == ip)


# ---------------------------------------------------------------------------
# Load and search
# ---------------------------------------------------------------------------


class TestLoadAndSearch:
    """Verify the session view of a freshly loaded file."""

    def test_snapshot_matches_file(self, editor: HostsEditor) -> None:
        """Before any edit the pending output equals the file."""
        assert editor.render() == SAMPLE

    def test_search_ranks_match_first(self, editor: HostsEditor) -> None:
        """Searching 'foo' puts the 10.0.0.5 entry above localhost."""
        ips = [m.ip for m, _ in editor.search("foo")]
        assert ips.index("10.0.0.5") < ips.index("127.0.0.1")

    def test_deleted_still_saved(self, editor: HostsEditor) -> None:
        """A deleted entry is still written on save."""
        editor.toggle_deleted(_record(editor, "10.0.0.5").id)
        assert "10.0.0.5 foo.example bar.example" in editor.store.snapshot_for_save()

    def test_load_callback(self, editor: HostsEditor) -> None:
        """load() reports each record as it arrives."""
        seen: list[int] = []
        editor.load(on_record=lambda r: seen.append(r.id))
        assert len(seen) == 3

    def test_sites_groups_by_registrable_domain(self, tmp_path: Path) -> None:
        """Mappings sharing an eTLD+1 are grouped together."""
        path = tmp_path / "hosts"
        path.write_text(
            "10.0.0.1 api.example.co.uk\n10.0.0.2 www.example.co.uk\n127.0.0.1 localhost\n",
            encoding="utf-8",
        )
        ed = HostsEditor(path)
        ed.load()
        groups = ed.sites()
        assert sorted(groups) == ["example.co.uk", "localhost"]
        assert [m.ip for m in groups["example.co.uk"]] == ["10.0.0.1", "10.0.0.2"]


# ---------------------------------------------------------------------------
# Renew
# ---------------------------------------------------------------------------


class TestRenew:
    """Verify re-resolving a mapping through the lookup service."""

    def test_renew_assigns_first_address(self, editor: HostsEditor) -> None:
        """A successful renew takes the address of the first domain."""
        record = _record(editor, "10.0.0.5")
        assert _renew_with_service(editor, record.id) is True
        assert record.ip == "10.9.9.1"
        assert editor.notifications == []

    def test_partial_failure_leaves_record(self, editor: HostsEditor) -> None:
        """If one of two lookups fails, nothing changes and one notice is raised."""
        ADDRESSES.pop("bar.example")
        try:
            record = _record(editor, "10.0.0.5")
            assert _renew_with_service(editor, record.id) is False
        finally:
            ADDRESSES["bar.example"] = "10.9.9.2"
        assert record.ip == "10.0.0.5"
        assert len(editor.notifications) == 1
        assert editor.notifications[0].level == "warning"
        assert "bar.example" in editor.notifications[0].message

    def test_renew_without_endpoint(self, editor: HostsEditor) -> None:
        """Renew without a configured endpoint reports instead of raising."""
        record = _record(editor, "10.0.0.5")
        assert asyncio.run(editor.renew(record.id)) is False
        assert len(editor.notifications) == 1
        assert record.ip == "10.0.0.5"

    def test_renew_unknown_id(self, editor: HostsEditor) -> None:
        """Renewing a missing or comment id reports a notice."""
        editor.endpoint = "http://127.0.0.1:9/lookup"
        assert asyncio.run(editor.renew(9999)) is False
        assert len(editor.notifications) == 1

    def test_notify_hook(self, tmp_path: Path) -> None:
        """Notifications are forwarded to the hook given at construction."""
        received: list[Notification] = []
        ed = HostsEditor(tmp_path / "hosts", notify=received.append)
        ed.notify("info", "hello")
        assert received == [Notification("info", "hello")]


# ---------------------------------------------------------------------------
# Preview and save
# ---------------------------------------------------------------------------


class TestPreviewAndSave:
    """Verify the diff preview and both save paths."""

    def test_preview_without_changes(self, editor: HostsEditor) -> None:
        """No edits produce an empty diff."""
        assert editor.preview() == []

    def test_preview_shows_renewed_address(self, editor: HostsEditor) -> None:
        """An address change shows as a removed and an added line."""
        record = _record(editor, "10.0.0.5")
        editor.store.set_ip_address(record.id, "10.0.0.6")
        diff = editor.preview()
        assert "-10.0.0.5 foo.example bar.example" in diff
        assert "+10.0.0.6 foo.example bar.example" in diff

    def test_save_to_path(self, editor: HostsEditor, tmp_path: Path) -> None:
        """Saving to an explicit path writes the rendered text there."""
        target = tmp_path / "export" / "hosts"
        editor.save(target)
        assert target.read_text(encoding="utf-8") == SAMPLE

    def test_save_requests_privileged_write(
        self, editor: HostsEditor, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Saving the system file backs it up and hands the text to the writer."""
        requests: list[tuple[str, Path, str | None]] = []
        monkeypatch.setattr(
            hosts_io,
            "request_privileged_write",
            lambda text, target, cmd: requests.append((text, target, cmd)),
        )
        editor.save()
        assert requests == [(SAMPLE, editor.path, editor.elevate_cmd)]
        assert (tmp_path / "backups" / "hosts.bak").read_text(encoding="utf-8") == SAMPLE

    def test_save_without_home_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """With no backup dir and no home, the save still reaches the writer."""

        def _no_home() -> Path:
            raise RuntimeError("Could not determine home directory")

        path = tmp_path / "hosts"
        path.write_text(SAMPLE, encoding="utf-8")
        monkeypatch.setattr(Path, "home", staticmethod(_no_home))
        ed = HostsEditor(path)
        ed.load()
        requests: list[str] = []
        monkeypatch.setattr(
            hosts_io, "request_privileged_write", lambda text, target, cmd: requests.append(text)
        )
        ed.save()
        assert ed.backup_dir is None
        assert requests == [SAMPLE]
