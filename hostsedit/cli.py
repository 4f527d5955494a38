#!/usr/bin/env python3
"""
cli.py

Interactive editor for the system hosts file.

Loads the hosts file, then reads commands from the terminal until 'quit'
or end of input. Type 'help' inside the editor for the command list.

Usage:
    python -m hostsedit [--file PATH] [--endpoint URL] [--timeout SECONDS]
"""

from __future__ import annotations

import argparse
import logging
import sys

from hostsedit.editor import HostsEditor
from hostsedit.shell import EditorShell
from hostsedit.utils import (
    DEFAULT_ELEVATE_CMD,
    DEFAULT_LOOKUP_ENDPOINT,
    DEFAULT_TIMEOUT,
    default_hosts_path,
)


# ----------------------------------------
# Helpers
# ----------------------------------------
def _configure_logging(verbose: bool = False) -> logging.Logger:
    """Return configured editor logger with a clean, single-line format."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
        force=True,
        stream=sys.stderr,
    )
    return logging.getLogger("hostsedit")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hostsedit", description="Interactive hosts file editor"
    )
    parser.add_argument(
        "-f",
        "--file",
        default=str(default_hosts_path()),
        help="Hosts file to edit (default: the system hosts file)",
    )
    parser.add_argument(
        "-e",
        "--endpoint",
        default=DEFAULT_LOOKUP_ENDPOINT,
        help="Lookup service URL used by 'renew' (GET <endpoint>?domain=...)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Lookup request timeout (seconds)",
    )
    parser.add_argument(
        "--elevate-cmd",
        default=DEFAULT_ELEVATE_CMD,
        help="Command prefix used to gain write access on save (POSIX)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def run(shell: EditorShell, prompt: str = "hosts> ") -> None:
    """Read commands until the shell asks to exit or input ends."""
    try:
        while True:
            try:
                command = input(prompt)
            except EOFError:
                print()
                break
            result = shell.execute(command)
            if result == EditorShell.EXIT_SENTINEL:
                break
            if result:
                print(result)
    except KeyboardInterrupt:
        print("\nInterrupted.")


# ----------------------------------------
# CLI entrypoint
# ----------------------------------------
def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for the interactive editor."""
    args = build_parser().parse_args(argv)
    log = _configure_logging(args.verbose)

    editor = HostsEditor(
        args.file,
        endpoint=args.endpoint,
        timeout=args.timeout,
        elevate_cmd=args.elevate_cmd,
    )
    try:
        editor.load()
    except OSError as exc:
        raise SystemExit(f"Cannot read hosts file {args.file}: {exc}") from exc

    log.debug("Editing %s", editor.path)
    count = len(editor.store.mappings())
    print(f"{editor.path}: {count} entries. Type 'help' for commands.")
    run(EditorShell(editor))


if __name__ == "__main__":
    main()
