"""Shared test fixtures and configuration."""

from __future__ import annotations

import itertools
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from matsearch.config.settings import Settings
from matsearch.models.record import Record, Source


@pytest.fixture
def dataset_entries() -> list[dict[str, Any]]:
    """Raw local dataset entries, in the on-disk shape."""
    return [
        {
            "id": "local-sic",
            "formula": "SiC",
            "name": "Silicon carbide",
            "spacegroup": "P6_3mc",
            "band_gap": 2.3,
            "density": 3.21,
            "fracture_toughness": 3.1,
            "tags": ["ceramic", "semiconductor"],
        },
        {
            "id": "local-zro2",
            "formula": "ZrO2",
            "name": "Zirconia",
            "density": 6.05,
            "fracture_toughness": 9.0,
            "tags": ["ceramic", "oxide"],
        },
        {
            "formula": "Si3N4",
            "name": "Silicon nitride",
            "band_gap": 4.6,
            "tags": ["nitride", "al2o3-like"],
        },
        {
            "id": "local-al2o3",
            "remote_id": "mp-1143",
            "formula": "Al2O3",
            "name": "Alumina",
            "spacegroup": "R-3c",
            "band_gap": 5.85,
            "density": 3.98,
            "tags": ["oxide"],
        },
    ]


@pytest.fixture
def dataset_path(tmp_path: Path, dataset_entries: list[dict[str, Any]]) -> Path:
    """Local dataset written to a temporary JSON file."""
    path = tmp_path / "local_materials.json"
    path.write_text(json.dumps(dataset_entries), encoding="utf-8")
    return path


@pytest.fixture
def settings(dataset_path: Path) -> Settings:
    """Create a test Settings instance pointing at the temporary dataset, with no remote key."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        local={"path": str(dataset_path)},
        remote={"api_key": ""},
    )


@pytest.fixture
def make_record() -> Callable[..., Record]:
    """Factory for records with unique ids."""
    counter = itertools.count()

    def _make(formula: str = "SiC", source: Source = Source.LOCAL, **fields: Any) -> Record:
        fields.setdefault("id", f"{source.value}_{next(counter)}")
        return Record(formula=formula, source=source, **fields)

    return _make
