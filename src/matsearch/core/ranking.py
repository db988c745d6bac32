"""Deduplication and relevance ranking for merged provider results."""

from __future__ import annotations

from matsearch.models.record import Record, Source

SUBSTRING_BONUS = 10
EXACT_FORMULA_BONUS = 30
REMOTE_SOURCE_BONUS = 2


def dedup_key(record: Record) -> str:
    """Identity used to collapse duplicates across providers.

    A remote identifier wins when present, so a local entry that references
    a remote material collides with that material's remote record.
    """
    if record.remote_id:
        return record.remote_id
    return f"{record.source.value}:{record.formula}:{record.spacegroup or ''}"


def deduplicate(records: list[Record]) -> list[Record]:
    """Keep the first record seen for each dedup key, preserving order."""
    seen: dict[str, Record] = {}
    for record in records:
        seen.setdefault(dedup_key(record), record)
    return list(seen.values())


def relevance_score(record: Record, needle: str | None) -> int:
    """Lexical/source relevance of *record* for the lower-cased query text *needle*."""
    score = 0
    if needle:
        if needle in record.haystack:
            score += SUBSTRING_BONUS
        if record.formula.lower() == needle:
            score += EXACT_FORMULA_BONUS
    if record.source is Source.REMOTE:
        score += REMOTE_SOURCE_BONUS
    return score


def rank(records: list[Record], needle: str | None) -> list[Record]:
    """Order records by descending score; ties keep their incoming order."""
    return sorted(records, key=lambda r: -relevance_score(r, needle))
