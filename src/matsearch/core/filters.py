"""Record filters shared by the provider adapters.

Range filtering is strict: when a range is active, a record that lacks the
field is dropped, not passed through as "unknown". Relaxing this changes
result sets, so both adapters go through ``matches_ranges``.
"""

from __future__ import annotations

from matsearch.models.query import SearchQuery
from matsearch.models.record import Record


def matches_text(record: Record, needle: str | None) -> bool:
    """True if *needle* is a substring of the record's haystack (or there is no needle)."""
    if not needle:
        return True
    return needle in record.haystack


def matches_ranges(record: Record, query: SearchQuery) -> bool:
    """True if the record satisfies every active range filter of *query*."""
    return all(f.admits(getattr(record, field)) for field, f in query.range_filters().items())


def matches_query(record: Record, query: SearchQuery) -> bool:
    return matches_text(record, query.needle) and matches_ranges(record, query)
