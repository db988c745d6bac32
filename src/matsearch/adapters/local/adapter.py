"""Local dataset adapter — In-memory search over a bulk JSON dataset.

The dataset is a JSON array of material objects::

    [
      {"id": "sic-4h", "formula": "SiC", "name": "Silicon carbide",
       "spacegroup": "P6_3mc", "band_gap": 3.2, "tags": ["ceramic"]},
      ...
    ]

It is read on the first query and kept for the lifetime of the adapter
(which, in the server, is the lifetime of the process). There is no reload
path: a dataset that fails to load leaves the adapter answering every
query with no results until the process restarts.

Usage::

    adapter = LocalDatasetAdapter(path="data/local_materials.json")
    records = await adapter.search(SearchQuery(q="SiC"))
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from matsearch.adapters.base.adapter import AdapterHealth, MaterialsAdapter
from matsearch.adapters.base.exceptions import ConfigurationError, DatasetLoadError
from matsearch.core.filters import matches_query
from matsearch.models.query import SearchQuery
from matsearch.models.record import Record, Source, coerce_number

logger = logging.getLogger(__name__)

_NUMERIC_FIELDS = (
    "band_gap",
    "formation_energy",
    "density",
    "youngs_modulus",
    "bulk_modulus",
    "poisson_ratio",
    "fracture_toughness",
)


def _first_str(raw: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = raw.get(key)
        if value is not None and str(value) != "":
            return str(value)
    return None


def _scalar_props(props: Any) -> dict[str, Any]:
    if not isinstance(props, dict):
        return {}
    return {str(k): v for k, v in props.items() if v is None or isinstance(v, str | int | float | bool)}


def normalize_entry(raw: dict[str, Any], index: int) -> Record:
    """Map one dataset entry to a ``Record``.

    Identifiers fall back to ``local_<index>`` so every entry gets the same
    id on every query for the life of the cache.

    Raises:
        ValidationError: If the entry has no usable formula.
        ValueError: If ``tags`` is neither a string nor a list.
    """
    fallback_id = f"local_{index}"
    tags = raw.get("tags") or []
    if isinstance(tags, str):
        tags = [tags]
    elif not isinstance(tags, list | tuple):
        raise ValueError(f"tags must be a string or a list, got {type(tags).__name__}")
    props = raw.get("props") or {}

    return Record(
        id=_first_str(raw, "id", "local_id", "ml_id") or fallback_id,
        source=Source.LOCAL,
        formula=raw.get("formula") or "",
        local_id=_first_str(raw, "local_id", "ml_id", "id") or fallback_id,
        remote_id=_first_str(raw, "remote_id", "mp_id"),
        name=_first_str(raw, "name"),
        spacegroup=_first_str(raw, "spacegroup"),
        tags=tuple(str(t) for t in tags if t is not None),
        props=_scalar_props(props),
        **{field: coerce_number(raw.get(field)) for field in _NUMERIC_FIELDS},
    )


class LocalDatasetAdapter(MaterialsAdapter):
    """Provider adapter for the locally cached bulk dataset.

    Args:
        path: Path to the dataset JSON file.
        **kwargs: Extra keyword arguments (ignored, for config compat).
    """

    def __init__(self, path: str | Path = "data/local_materials.json", **kwargs: Any) -> None:
        self._path = Path(path)
        self._records: tuple[Record, ...] | None = None
        self._load_error: str | None = None
        self._load_lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return "local"

    @property
    def source(self) -> Source:
        return Source.LOCAL

    @property
    def loaded(self) -> bool:
        """True once a load has been attempted, whether or not it succeeded."""
        return self._records is not None

    async def initialize(self) -> None:
        """Validate configuration. The dataset itself is loaded lazily."""
        if not str(self._path) or str(self._path) == ".":
            raise ConfigurationError("Local dataset path is required. Set it via local.path")
        logger.info("Local dataset adapter initialized (path=%s, lazy load)", self._path)

    # ── Dataset cache ────────────────────────────────────────────────────

    async def records(self) -> tuple[Record, ...]:
        """Return the cached dataset, loading it on first use.

        Only the first caller performs the load; everyone else reads the
        populated tuple without locking.
        """
        if self._records is not None:
            return self._records

        async with self._load_lock:
            if self._records is None:
                loop = asyncio.get_running_loop()
                try:
                    self._records = await loop.run_in_executor(None, self._load_sync)
                except DatasetLoadError as e:
                    self._load_error = str(e)
                    self._records = ()
                    logger.critical(
                        "Local dataset failed to load; local results are disabled until restart: %s",
                        e,
                    )
        return self._records

    def _load_sync(self) -> tuple[Record, ...]:
        """Read and normalize the dataset file (runs in executor)."""
        start = time.monotonic()
        try:
            with open(self._path, encoding="utf-8") as f:
                raw = json.load(f)
        except OSError as e:
            raise DatasetLoadError(f"Cannot read {self._path}: {e}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DatasetLoadError(f"Invalid JSON in {self._path}: {e}") from e

        if not isinstance(raw, list):
            raise DatasetLoadError(f"{self._path} must contain a JSON array, got {type(raw).__name__}")

        records: list[Record] = []
        skipped = 0
        for index, entry in enumerate(raw):
            if not isinstance(entry, dict):
                skipped += 1
                logger.warning("Skipping local dataset entry %d: not an object", index)
                continue
            try:
                records.append(normalize_entry(entry, index))
            except ValidationError as e:
                skipped += 1
                logger.warning("Skipping local dataset entry %d: %s", index, e.errors()[0]["msg"])
            except ValueError as e:
                skipped += 1
                logger.warning("Skipping local dataset entry %d: %s", index, e)

        took_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Loaded local dataset: %d records (%d skipped) from %s in %d ms",
            len(records),
            skipped,
            self._path,
            took_ms,
        )
        return tuple(records)

    # ── Search ───────────────────────────────────────────────────────────

    async def search(self, query: SearchQuery) -> list[Record]:
        """Filter the cached dataset by text and numeric ranges."""
        data = await self.records()
        matches = [record for record in data if matches_query(record, query)]
        logger.debug("Local search: q=%s, matched=%d of %d", query.q, len(matches), len(data))
        return matches

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> AdapterHealth:
        """Report whether the dataset is loaded and how many records it holds."""
        now = datetime.now(UTC).isoformat()
        if self._load_error is not None:
            return AdapterHealth(status="unhealthy", last_check=now, record_count=0, message=self._load_error)
        if self._records is None:
            return AdapterHealth(status="healthy", last_check=now, message=f"Not loaded yet: {self._path}")
        return AdapterHealth(
            status="healthy",
            last_check=now,
            record_count=len(self._records),
            message=str(self._path),
        )
