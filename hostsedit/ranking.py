"""
ranking.py

Fuzzy ranking of mapping records against a search query.

Similarity is thefuzz's token-set ratio scaled to [0, 1]. Both sides are
lowercased and split on every non-alphanumeric character, so a domain
like "foo.example" is the token set {"foo", "example"}. A query whose
tokens are all contained in the domain (or the other way round) scores
1.0; otherwise the score is the edit-distance ratio of the token sets.
An entry's relevance is its best score across all of its domain names.

Example:
    similarity("foo.example", "foo.example")  # 1.0
    similarity("foo", "foo.example")          # 1.0
    similarity("xyz", "localhost")            # 0.0
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import lru_cache

from thefuzz import fuzz

from hostsedit.records import LineRecord, MappingLine
from hostsedit.utils import DOMAIN_CACHE_SIZE

logger = logging.getLogger(__name__)


@lru_cache(maxsize=DOMAIN_CACHE_SIZE)
def similarity(a: str, b: str) -> float:
    """Return a token-set similarity score in [0, 1] between `a` and `b`."""
    if a.strip().lower() == b.strip().lower():
        return 1.0
    # empty or punctuation-only input scores 0
    return fuzz.token_set_ratio(a, b) / 100.0


def relevance(query: str, record: MappingLine) -> float:
    """Best similarity between `query` and any of the record's domains."""
    return max((similarity(query, d) for d in record.domains), default=0.0)


def rank_with_scores(
    query: str, entries: Iterable[LineRecord]
) -> list[tuple[MappingLine, float]]:
    """
    Return (record, score) pairs for the mapping records of `entries`,
    sorted by descending relevance.

    Comment and blank records are dropped before scoring. Records with equal
    scores keep their input order.
    """
    scored = [
        (e, relevance(query, e)) for e in entries if isinstance(e, MappingLine)
    ]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    logger.debug("ranked %d entries for query %r", len(scored), query)
    return scored


def rank(query: str, entries: Iterable[LineRecord]) -> list[MappingLine]:
    """Return the mapping records of `entries` sorted by descending relevance."""
    return [record for record, _ in rank_with_scores(query, entries)]
