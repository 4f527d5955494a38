"""
store.py

In-memory, ordered model of every line in a hosts file.

The store is the single source of truth for the searchable view and for
the text written on save. Records are only ever appended (while loading)
and mutated in place afterwards; nothing is removed. Deleting an entry
flips its `deleted` flag and the line is still part of the saved output.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from itertools import count

from hostsedit.ranking import rank
from hostsedit.records import LineRecord, MappingLine, parse_line, render_line

logger = logging.getLogger(__name__)


class LineStore:
    """Ordered, mutable collection of hosts-file line records."""

    def __init__(self) -> None:
        self._records: list[LineRecord] = []
        self._by_id: dict[int, LineRecord] = {}
        self._ids = count(1)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[LineRecord]:
        return iter(self._records)

    # --------------------
    # Population
    # --------------------
    def next_id(self) -> int:
        """Return the next record identifier. Never repeats within a store."""
        return next(self._ids)

    def append(self, record: LineRecord) -> None:
        self._records.append(record)
        self._by_id[record.id] = record

    def parse_and_append(self, raw_line: str) -> LineRecord:
        """Parse `raw_line` with a fresh identifier and append the record."""
        record = parse_line(raw_line, self.next_id())
        self.append(record)
        return record

    def load_all(self, records: Iterable[LineRecord]) -> None:
        """Replace the store content with `records`, keeping their order."""
        self._records = []
        self._by_id = {}
        for record in records:
            self.append(record)

    # --------------------
    # Queries
    # --------------------
    def get(self, record_id: int) -> LineRecord | None:
        return self._by_id.get(record_id)

    def mappings(self) -> list[MappingLine]:
        """All mapping records in file order (deleted ones included)."""
        return [r for r in self._records if isinstance(r, MappingLine)]

    def visible_mappings(self, query: str) -> list[MappingLine]:
        """Mapping records ranked against `query`; deleted records stay listed."""
        return rank(query, self._records)

    def snapshot_for_save(self) -> list[str]:
        """Render every record, deleted or not, in file order."""
        return [render_line(r) for r in self._records]

    # --------------------
    # Mutations
    # --------------------
    def toggle_deleted(self, record_id: int) -> None:
        """Flip the deleted flag of a record; unknown ids are ignored."""
        record = self._by_id.get(record_id)
        if record is None:
            logger.debug("toggle_deleted: no record with id %d", record_id)
            return
        record.deleted = not record.deleted

    def set_ip_address(self, record_id: int, new_ip: str) -> None:
        """Overwrite the address of a mapping; other ids are ignored."""
        record = self._by_id.get(record_id)
        if not isinstance(record, MappingLine):
            logger.debug("set_ip_address: id %d is not a mapping", record_id)
            return
        record.ip = new_ip
