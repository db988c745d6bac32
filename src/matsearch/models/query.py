"""Query models — Caller intent for one aggregated search."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_PAGE_SIZE = 24


class InvalidQueryError(ValueError):
    """Raised when request fields cannot form a valid ``SearchQuery``.

    This is a client-input fault; callers should report it to the requester
    (HTTP 422) rather than treat it as a server error.
    """


class DatasetScope(str, Enum):
    """Which providers a query is dispatched to.

    Any other value is rejected rather than mapped to ``ALL``.
    """

    ALL = "all"
    LOCAL = "local"
    REMOTE = "remote"


class RangeFilter(BaseModel):
    """Inclusive ``[min, max]`` constraint on a nullable numeric field.

    Either bound may be omitted. A filter with no bounds is inactive and
    never excludes anything. An active filter always rejects a missing
    value, even when the bounds would be satisfied vacuously.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    min: float | None = Field(default=None, allow_inf_nan=False, description="Lower bound (inclusive)")
    max: float | None = Field(default=None, allow_inf_nan=False, description="Upper bound (inclusive)")

    @property
    def active(self) -> bool:
        return self.min is not None or self.max is not None

    def admits(self, value: float | None) -> bool:
        """Return True if *value* is present and within the set bounds."""
        if value is None:
            return False
        if self.min is not None and value < self.min:
            return False
        return not (self.max is not None and value > self.max)


# Flat request parameter -> (range field, bound)
_RANGE_PARAMS: dict[str, tuple[str, str]] = {
    "bandGapMin": ("band_gap", "min"),
    "bandGapMax": ("band_gap", "max"),
    "toughMin": ("fracture_toughness", "min"),
    "toughMax": ("fracture_toughness", "max"),
    "densMin": ("density", "min"),
    "densMax": ("density", "max"),
}


class SearchQuery(BaseModel):
    """A keyword/property search over the materials providers.

    Example::

        SearchQuery(q="Al2O3", dataset="local", band_gap=RangeFilter(min=1.0))
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    q: str | None = Field(default=None, description="Free-text term (formula or keyword)")
    dataset: DatasetScope = Field(default=DatasetScope.ALL, description="Provider scope: all, local, remote")
    page: int = Field(default=1, description="1-based page number (values below 1 act as 1)")
    page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        alias="pageSize",
        description="Items per page (clamped to [1, 100])",
    )
    band_gap: RangeFilter = Field(default_factory=RangeFilter, description="Band gap range (eV)")
    fracture_toughness: RangeFilter = Field(default_factory=RangeFilter, description="Fracture toughness range")
    density: RangeFilter = Field(default_factory=RangeFilter, description="Density range (g/cm^3)")

    @field_validator("q")
    @classmethod
    def _blank_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v

    @property
    def needle(self) -> str | None:
        """Lower-cased text term, or None when the query has no text."""
        return self.q.lower() if self.q else None

    def range_filters(self) -> dict[str, RangeFilter]:
        """Active range filters keyed by the ``Record`` field they constrain."""
        filters = {
            "band_gap": self.band_gap,
            "fracture_toughness": self.fracture_toughness,
            "density": self.density,
        }
        return {field: f for field, f in filters.items() if f.active}

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> SearchQuery:
        """Build a query from flat request parameters.

        Recognized keys: ``q``, ``dataset``, ``page``, ``pageSize``,
        ``bandGapMin``, ``bandGapMax``, ``toughMin``, ``toughMax``,
        ``densMin``, ``densMax``. Empty strings count as missing; unknown
        keys are ignored.

        Raises:
            InvalidQueryError: If a bound is not a finite number, a page
                field is not an integer, or ``dataset`` is not recognized.
        """
        values = {k: v for k, v in params.items() if v is not None and v != ""}

        data: dict[str, Any] = {}
        for key in ("q", "dataset", "page", "pageSize"):
            if key in values:
                data[key] = values[key]

        ranges: dict[str, dict[str, Any]] = {}
        for param, (field, bound) in _RANGE_PARAMS.items():
            if param in values:
                ranges.setdefault(field, {})[bound] = values[param]
        data.update(ranges)

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise InvalidQueryError(f"Invalid search query: {problems}") from e
