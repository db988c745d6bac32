"""Material record model — The normalized entry every provider produces.

Both the local dataset and the remote service speak different field
dialects; adapters translate them into ``Record`` so the engine can merge,
score and paginate without caring where an entry came from.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

PropValue = str | float | int | bool | None


class Source(str, Enum):
    """Provider that owns a record."""

    LOCAL = "local"
    REMOTE = "remote"


def coerce_number(value: Any) -> float | None:
    """Convert a raw provider value into a finite float, or ``None`` when absent.

    Booleans, non-numeric strings, NaN and infinities all count as absent.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


class Record(BaseModel):
    """A normalized materials entry.

    Records are immutable once built. Optional numeric properties are either
    a finite float or ``None``; there is no other representation of "unknown".
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Process-unique identifier assigned by the owning adapter")
    source: Source = Field(description="Owning provider")
    formula: str = Field(description="Chemical formula, e.g. 'Al2O3'")
    local_id: str | None = Field(default=None, description="Identifier in the local dataset")
    remote_id: str | None = Field(default=None, description="Identifier in the remote service (e.g. 'mp-1143')")
    name: str | None = Field(default=None, description="Common name")
    spacegroup: str | None = Field(default=None, description="Space group symbol")

    band_gap: float | None = Field(default=None, allow_inf_nan=False, description="Band gap (eV)")
    formation_energy: float | None = Field(default=None, allow_inf_nan=False, description="Formation energy (eV/atom)")
    density: float | None = Field(default=None, allow_inf_nan=False, description="Density (g/cm^3)")
    youngs_modulus: float | None = Field(default=None, allow_inf_nan=False, description="Young's modulus (GPa)")
    bulk_modulus: float | None = Field(default=None, allow_inf_nan=False, description="Bulk modulus (GPa)")
    poisson_ratio: float | None = Field(default=None, allow_inf_nan=False, description="Poisson's ratio")
    fracture_toughness: float | None = Field(
        default=None, allow_inf_nan=False, description="Fracture toughness (MPa·m^0.5)"
    )

    tags: tuple[str, ...] = Field(default=(), description="Free-form tags, in source order")
    props: dict[str, PropValue] = Field(default_factory=dict, description="Open-ended extra properties")

    @field_validator("formula")
    @classmethod
    def _formula_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("formula must not be empty")
        return v

    @property
    def haystack(self) -> str:
        """Lower-cased text that keyword matching runs against."""
        return " ".join([self.formula, self.name or "", *self.tags]).lower()
