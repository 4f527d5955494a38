#!/usr/bin/env python3
"""
hosts_io.py

Reading the hosts file into a LineStore and handing edited text back to
a privileged writer.

Responsibilities:
 - Stream the source file line-by-line into the store (records appear
   incrementally; an optional callback observes each one).
 - Render the store into the full file text.
 - Atomic writes for unprotected targets (exports) and best-effort backups.
 - Spawn the elevated copy that replaces the protected system file. The
   core never opens that file for writing itself.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import sys
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path

from hostsedit.records import LineRecord
from hostsedit.store import LineStore
from hostsedit.utils import (
    BACKUP_SUFFIX,
    DEFAULT_ELEVATE_CMD,
    IO_BUFFER_SIZE,
    is_privileged,
)

logger = logging.getLogger(__name__)

BACKUP_DIR_NAME = ".hostsedit"
FILE_ENCODING = "utf-8"
# round-trips bytes that are not valid UTF-8
FILE_ERRORS = "surrogateescape"


# ----------------------------------------
# Reading
# ----------------------------------------
def iter_hosts_lines(path: str | Path) -> Iterator[str]:
    """Yield each line of `path` without its trailing newline."""
    with Path(path).open(
        "r", encoding=FILE_ENCODING, errors=FILE_ERRORS, buffering=IO_BUFFER_SIZE
    ) as fh:
        for raw in fh:
            yield raw.rstrip("\r\n")


def load_hosts_file(
    path: str | Path,
    store: LineStore | None = None,
    on_record: Callable[[LineRecord], None] | None = None,
) -> LineStore:
    """
    Parse every line of `path` into `store` (a new one if omitted).

    `on_record` is called after each record is appended, so a caller can
    render the list while it is still growing.
    """
    target = store if store is not None else LineStore()
    for line in iter_hosts_lines(path):
        record = target.parse_and_append(line)
        if on_record is not None:
            on_record(record)
    logger.info(
        "Loaded %s: %d lines, %d mappings", path, len(target), len(target.mappings())
    )
    return target


# ----------------------------------------
# Writing
# ----------------------------------------
def render_text(lines: list[str]) -> str:
    """Join rendered lines into file text with a trailing newline."""
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def default_backup_dir() -> Path:
    """Per-user backup directory. Raises RuntimeError when no home is known."""
    return Path.home() / BACKUP_DIR_NAME


def _stage_text(text: str, encoding: str = FILE_ENCODING, **kwargs) -> Path:
    """Write `text` to a new temp file and return its path.

    Undecodable bytes read through surrogateescape are written back as the
    same bytes. On failure the temp file is removed before re-raising.
    """
    tmp = tempfile.NamedTemporaryFile(
        "w",
        delete=False,
        encoding=encoding,
        errors=FILE_ERRORS,
        newline="\n",
        **kwargs,
    )
    tmp_path = Path(tmp.name)
    try:
        with tmp:
            tmp.write(text)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise
    return tmp_path


def atomic_write_text(target: Path, text: str, encoding: str = FILE_ENCODING) -> None:
    """
    Atomically write `text` to `target`.

    Ensures the target directory exists and replaces the file in one step
    so an interrupted write never leaves a truncated file behind.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = _stage_text(
        text, encoding, dir=target.parent, prefix=".tmp_hostsedit_"
    )
    try:
        tmp_path.replace(target)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise


def backup_hosts_file(
    path: str | Path, backup_dir: str | Path | None = None
) -> Path | None:
    """Copy `path` to `<backup_dir>/<name>.bak`. Best-effort; returns None on failure.

    `backup_dir` defaults to `default_backup_dir()`.
    """
    src = Path(path)
    try:
        dest_dir = Path(backup_dir) if backup_dir is not None else default_backup_dir()
        dest = dest_dir / f"{src.name}{BACKUP_SUFFIX}"
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dest)
    except (OSError, RuntimeError) as exc:
        logger.warning("Backup of %s failed: %s", src, exc)
        return None
    logger.info("Backed up %s to %s", src, dest)
    return dest


def _ps_quote(value: str) -> str:
    """Quote `value` as a PowerShell single-quoted string literal."""
    return "'" + value.replace("'", "''") + "'"


def build_copy_command(
    staging: Path, target: Path, elevate_cmd: str | None = DEFAULT_ELEVATE_CMD
) -> list[str]:
    """Return the argv that copies `staging` over `target` with elevated rights."""
    if sys.platform.startswith("win"):
        # cmd.exe receives the joined list; paths keep their double quotes
        copy_args = ["/c", "copy", "/Y", f'"{staging}"', f'"{target}"']
        script = (
            "Start-Process -FilePath cmd.exe -Verb RunAs -WindowStyle Hidden "
            "-ArgumentList " + ",".join(_ps_quote(a) for a in copy_args)
        )
        return ["powershell", "-NoProfile", "-Command", script]
    copy = ["cp", str(staging), str(target)]
    if is_privileged() or not elevate_cmd:
        return copy
    return [*shlex.split(elevate_cmd), *copy]


def request_privileged_write(
    rendered_text: str,
    target: str | Path,
    elevate_cmd: str | None = DEFAULT_ELEVATE_CMD,
) -> None:
    """
    Stage `rendered_text` in a temp file and spawn an elevated copy onto `target`.

    Fire-and-forget: the copy process is not awaited and its outcome is not
    verified here.
    """
    staging = _stage_text(rendered_text, prefix="hostsedit_", suffix=".hosts")
    cmd = build_copy_command(staging, Path(target), elevate_cmd)
    try:
        proc = subprocess.Popen(cmd)
    except OSError:
        staging.unlink(missing_ok=True)
        raise

    # staging file is left in place for the writer process to read
    logger.info(
        "Requested privileged write of %s (staged at %s, pid %d)",
        target,
        staging,
        proc.pid,
    )
