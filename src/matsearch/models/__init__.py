"""Shared models — records, queries and results."""

from matsearch.models.query import DatasetScope, InvalidQueryError, RangeFilter, SearchQuery
from matsearch.models.record import Record, Source
from matsearch.models.response import SearchResult

__all__ = [
    "DatasetScope",
    "InvalidQueryError",
    "RangeFilter",
    "Record",
    "SearchQuery",
    "SearchResult",
    "Source",
]
