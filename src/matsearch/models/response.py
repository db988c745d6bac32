"""Search response model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from matsearch.models.record import Record


class SearchResult(BaseModel):
    """One page of an aggregated, ranked result set."""

    total: int = Field(description="Matching records after merge, dedup and filtering, before pagination")
    items: list[Record] = Field(default_factory=list, description="Records on the requested page")
