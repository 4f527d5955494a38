"""
records.py

Typed line records for a hosts file and the parser/renderer between them
and raw text.

Every physical line becomes exactly one record:
 - CommentLine: an empty line or a '#' comment, stored verbatim (trimmed).
 - MappingLine: one IP address token followed by its domain tokens.

Parsing and rendering are total: any input line yields a record and any
record renders back to a single line. Inter-token whitespace is normalized
to single spaces on render.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from hostsedit.utils import is_comment_or_blank, split_tokens


@dataclass
class BaseLine:
    id: int
    deleted: bool = field(default=False, kw_only=True)


@dataclass
class CommentLine(BaseLine):
    """A comment or blank line, kept as its trimmed text."""

    text: str = ""


@dataclass
class MappingLine(BaseLine):
    """One address shared by one or more domain names."""

    ip: str = ""
    domains: list[str] = field(default_factory=list)


LineRecord = CommentLine | MappingLine


def parse_line(raw_line: str, record_id: int) -> LineRecord:
    """Parse one raw hosts-file line into a record carrying `record_id`."""
    trimmed = raw_line.strip()
    if is_comment_or_blank(trimmed):
        return CommentLine(record_id, text=trimmed)

    tokens = split_tokens(trimmed)
    if not tokens:
        # unreachable for non-empty input; keep the text rather than fail
        return CommentLine(record_id, text=trimmed)
    return MappingLine(record_id, ip=tokens[0], domains=tokens[1:])


def render_line(record: LineRecord) -> str:
    """Render a record back into a single hosts-file line (no newline)."""
    if isinstance(record, MappingLine):
        if not record.domains:
            return record.ip
        return f"{record.ip} {' '.join(record.domains)}"
    return record.text
