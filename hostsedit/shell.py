"""Command interpreter for the hosts editor.

The shell turns one line of user input into one string of output.  It
performs no terminal I/O itself, so every command is testable by calling
``execute()`` and inspecting the returned text; ``hostsedit.cli`` wraps it
in the read-eval-print loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from hostsedit.editor import HostsEditor
from hostsedit.records import MappingLine, render_line

HELP_TEXT = """\
Commands:
  list                 show all entries in file order
  search <query>       rank entries by similarity to <query>
  delete <id>          mark an entry deleted
  restore <id>         clear the deleted mark
  toggle <id>          flip the deleted mark
  renew <id>           re-resolve the entry's domains to a fresh address
  preview              show pending changes as a diff
  save [path]          write the file (to the hosts file when no path)
  sites                group entries by registrable domain
  help                 show this text
  quit                 leave the editor"""


def format_entry(record: MappingLine, score: float | None = None) -> str:
    """Format one mapping for display: id, marker, line, optional score."""
    marker = " [deleted]" if record.deleted else ""
    line = f"{record.id:>5}{marker}  {render_line(record)}"
    if score is not None:
        line += f"  ({score:.2f})"
    return line


class EditorShell:
    """Dispatch user commands to a HostsEditor."""

    EXIT_SENTINEL = "__exit__"

    def __init__(self, editor: HostsEditor) -> None:
        self.editor = editor
        self._commands: dict[str, Callable[[list[str]], str]] = {
            "list": self._cmd_list,
            "ls": self._cmd_list,
            "search": self._cmd_search,
            "find": self._cmd_search,
            "delete": self._cmd_delete,
            "restore": self._cmd_restore,
            "toggle": self._cmd_toggle,
            "renew": self._cmd_renew,
            "preview": self._cmd_preview,
            "save": self._cmd_save,
            "sites": self._cmd_sites,
            "help": self._cmd_help,
            "quit": self._cmd_quit,
            "exit": self._cmd_quit,
        }

    def execute(self, command: str) -> str:
        """Run one command line and return its output."""
        parts = command.strip().split()
        if not parts:
            return ""
        name, args = parts[0].lower(), parts[1:]
        handler = self._commands.get(name)
        if handler is None:
            return f"Unknown command: {name} (type 'help')"
        before = len(self.editor.notifications)
        output = handler(args)
        notes = [f"! {n.message}" for n in self.editor.notifications[before:]]
        return "\n".join(filter(None, [output, *notes]))

    # --------------------
    # Helpers
    # --------------------
    def _mapping_arg(self, args: list[str]) -> MappingLine | str:
        """Resolve a single id argument to a mapping, or return an error text."""
        if len(args) != 1:
            return "Expected exactly one entry id"
        try:
            record_id = int(args[0])
        except ValueError:
            return f"Not an entry id: {args[0]}"
        record = self.editor.store.get(record_id)
        if not isinstance(record, MappingLine):
            return f"No entry with id {record_id}"
        return record

    # --------------------
    # Commands
    # --------------------
    def _cmd_list(self, args: list[str]) -> str:
        mappings = self.editor.store.mappings()
        if not mappings:
            return "No entries."
        return "\n".join(format_entry(m) for m in mappings)

    def _cmd_search(self, args: list[str]) -> str:
        results = self.editor.search(" ".join(args))
        if not results:
            return "No entries."
        return "\n".join(format_entry(m, score) for m, score in results)

    def _cmd_delete(self, args: list[str]) -> str:
        record = self._mapping_arg(args)
        if isinstance(record, str):
            return record
        if not record.deleted:
            self.editor.toggle_deleted(record.id)
        return format_entry(record)

    def _cmd_restore(self, args: list[str]) -> str:
        record = self._mapping_arg(args)
        if isinstance(record, str):
            return record
        if record.deleted:
            self.editor.toggle_deleted(record.id)
        return format_entry(record)

    def _cmd_toggle(self, args: list[str]) -> str:
        record = self._mapping_arg(args)
        if isinstance(record, str):
            return record
        self.editor.toggle_deleted(record.id)
        return format_entry(record)

    def _cmd_renew(self, args: list[str]) -> str:
        record = self._mapping_arg(args)
        if isinstance(record, str):
            return record
        if asyncio.run(self.editor.renew(record.id)):
            return format_entry(record)
        return ""

    def _cmd_preview(self, args: list[str]) -> str:
        diff = self.editor.preview()
        return "\n".join(diff) if diff else "No pending changes."

    def _cmd_save(self, args: list[str]) -> str:
        if len(args) > 1:
            return "Usage: save [path]"
        target = args[0] if args else None
        try:
            self.editor.save(target)
        except (OSError, UnicodeError) as exc:
            return f"Save failed: {exc}"
        if target is not None:
            return f"Saved to {target}"
        return f"Save of {self.editor.path} requested"

    def _cmd_sites(self, args: list[str]) -> str:
        groups = self.editor.sites()
        if not groups:
            return "No entries."
        lines: list[str] = []
        for site in sorted(groups):
            lines.append(f"{site or '(no domain)'}:")
            lines.extend(format_entry(m) for m in groups[site])
        return "\n".join(lines)

    def _cmd_help(self, args: list[str]) -> str:
        return HELP_TEXT

    def _cmd_quit(self, args: list[str]) -> str:
        return self.EXIT_SENTINEL
