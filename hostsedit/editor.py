"""
editor.py

An editing session over one hosts file.

HostsEditor owns the LineStore for the session and implements the
user-facing flows on top of it: search, soft delete/restore, renew
(re-resolving a mapping through the lookup service), preview and save.
Failures in renew are turned into notifications; they never escape the
session.
"""

from __future__ import annotations

import difflib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import aiohttp

from hostsedit import hosts_io
from hostsedit.ranking import rank_with_scores
from hostsedit.records import LineRecord, MappingLine
from hostsedit.resolver import ResolveError, resolve_all
from hostsedit.store import LineStore
from hostsedit.utils import (
    DEFAULT_ELEVATE_CMD,
    DEFAULT_LOOKUP_ENDPOINT,
    DEFAULT_TIMEOUT,
    registrable_domain,
)

logger = logging.getLogger(__name__)

_LEVELS = {"info": logging.INFO, "warning": logging.WARNING, "error": logging.ERROR}


@dataclass(frozen=True)
class Notification:
    level: str
    message: str


class HostsEditor:
    """Editing session for a single hosts file."""

    def __init__(
        self,
        path: str | Path,
        *,
        endpoint: str | None = DEFAULT_LOOKUP_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT,
        elevate_cmd: str | None = DEFAULT_ELEVATE_CMD,
        backup_dir: str | Path | None = None,
        notify: Callable[[Notification], None] | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.path = Path(path)
        self.endpoint = endpoint
        self.timeout = timeout
        self.elevate_cmd = elevate_cmd
        self.backup_dir = Path(backup_dir) if backup_dir is not None else None
        self.store = LineStore()
        self.notifications: list[Notification] = []
        self._notify_hook = notify
        self._session = session
        self._baseline: list[str] = []

    # --------------------
    # Notifications
    # --------------------
    def notify(self, level: str, message: str) -> None:
        note = Notification(level, message)
        self.notifications.append(note)
        logger.log(_LEVELS.get(level, logging.INFO), message)
        if self._notify_hook is not None:
            self._notify_hook(note)

    # --------------------
    # Loading
    # --------------------
    def load(self, on_record: Callable[[LineRecord], None] | None = None) -> None:
        """Read the hosts file into a fresh store."""
        self.store = LineStore()
        hosts_io.load_hosts_file(self.path, self.store, on_record=on_record)
        self._baseline = self.store.snapshot_for_save()

    # --------------------
    # Viewing
    # --------------------
    def search(self, query: str) -> list[tuple[MappingLine, float]]:
        return rank_with_scores(query, self.store)

    def sites(self) -> dict[str, list[MappingLine]]:
        """Group mappings by the registrable domain of their first name."""
        groups: dict[str, list[MappingLine]] = {}
        for record in self.store.mappings():
            key = registrable_domain(record.domains[0]) if record.domains else ""
            groups.setdefault(key, []).append(record)
        return groups

    def preview(self) -> list[str]:
        """Unified diff between the file as loaded and the pending save output."""
        return list(
            difflib.unified_diff(
                self._baseline,
                self.store.snapshot_for_save(),
                fromfile=f"{self.path} (loaded)",
                tofile=f"{self.path} (pending)",
                lineterm="",
            )
        )

    # --------------------
    # Editing
    # --------------------
    def toggle_deleted(self, record_id: int) -> None:
        self.store.toggle_deleted(record_id)

    async def renew(self, record_id: int) -> bool:
        """
        Re-resolve a mapping's domains and assign the first address.

        Returns True when the address was updated. On any failure one
        notification is emitted and the record is left unchanged.
        """
        record = self.store.get(record_id)
        if not isinstance(record, MappingLine):
            self.notify("error", f"Renew failed: no mapping with id {record_id}")
            return False
        if not self.endpoint:
            self.notify("error", "Renew failed: no lookup endpoint configured")
            return False

        try:
            addresses = await resolve_all(
                record.domains, self.endpoint, self.timeout, session=self._session
            )
        except ResolveError as exc:
            names = " ".join(record.domains)
            self.notify("warning", f"Renew failed for {names}: {exc}")
            return False

        old_ip = record.ip
        self.store.set_ip_address(record_id, addresses[0])
        logger.info("Renewed %s: %s -> %s", record.domains[0], old_ip, addresses[0])
        return True

    # --------------------
    # Saving
    # --------------------
    def render(self) -> str:
        return hosts_io.render_text(self.store.snapshot_for_save())

    def save(self, target: str | Path | None = None) -> None:
        """
        Write the rendered store.

        Without `target` the system file is backed up and replaced through the
        privileged writer (fire-and-forget). With `target` the text is
        written there directly.
        """
        text = self.render()
        if target is not None:
            hosts_io.atomic_write_text(Path(target), text)
            logger.info("Wrote %d lines to %s", len(self.store), target)
            return
        hosts_io.backup_hosts_file(self.path, self.backup_dir)
        hosts_io.request_privileged_write(text, self.path, self.elevate_cmd)
