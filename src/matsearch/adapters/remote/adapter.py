"""Remote adapter — Materials property lookup via a Materials Project style summary API.

Sends one POST per query to the summary endpoint and normalizes the
returned documents into ``Record``.

API reference:
  POST {base_url}/materials/summary
    headers: X-API-KEY: <key>
    body: {"criteria": {"formula": ..., "band_gap_min": ..., ...},
           "properties": ["material_id", "formula_pretty", ...]}

The remote side is trusted to filter by formula, band gap and density only
as an optimization. Every range filter is applied again to the normalized
records, including fracture toughness, which the service does not provide.
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import ValidationError

from matsearch.adapters.base.adapter import AdapterHealth, MaterialsAdapter
from matsearch.adapters.base.exceptions import ProviderFaultError, ProviderUnavailableError
from matsearch.core.filters import matches_ranges
from matsearch.models.query import SearchQuery
from matsearch.models.record import Record, Source, coerce_number

logger = logging.getLogger(__name__)

SUMMARY_PROPERTIES = [
    "material_id",
    "formula_pretty",
    "band_gap",
    "density",
    "symmetry.symbol",
    "elasticity.K_VRH",
    "elasticity.G_VRH",
    "elasticity.E_Young",
    "elasticity.poisson_ratio",
    "formation_energy_per_atom",
]

_MAX_LOGGED_BODY = 1000


def _dig(doc: dict[str, Any], *path: str) -> Any:
    """Follow nested keys, returning None as soon as a level is missing."""
    value: Any = doc
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _first_number(*values: Any) -> float | None:
    for value in values:
        number = coerce_number(value)
        if number is not None:
            return number
    return None


class MaterialsProjectAdapter(MaterialsAdapter):
    """Provider adapter for the remote summary API.

    Without an API key the adapter stays idle and every search returns no
    records; that is a supported configuration, not an error.

    Args:
        base_url: Remote API base URL.
        api_key: API key sent as ``X-API-KEY``.
        summary_path: Path of the summary search endpoint.
        timeout: HTTP timeout in seconds. ``None`` disables it; callers that
            need bounded latency should wrap ``search`` in their own deadline.
    """

    def __init__(
        self,
        base_url: str = "https://api.materialsproject.org",
        api_key: str = "",
        summary_path: str = "/materials/summary",
        timeout: float | None = None,
        **kwargs: Any,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._summary_path = "/" + summary_path.lstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "remote"

    @property
    def source(self) -> Source:
        return Source.REMOTE

    async def initialize(self) -> None:
        """Initialize the HTTP client (only when an API key is configured)."""
        if not self._api_key:
            logger.info("Remote adapter has no API key; remote results are disabled")
            return

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "X-API-KEY": self._api_key,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=httpx.Timeout(self._timeout),
        )
        logger.info("Remote adapter initialized (endpoint: %s%s)", self._base_url, self._summary_path)

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Request ──────────────────────────────────────────────────────────

    @staticmethod
    def build_request_body(query: SearchQuery) -> dict[str, Any]:
        """Translate a query into the summary endpoint's request body."""
        criteria: dict[str, Any] = {}
        if query.q:
            criteria["formula"] = query.q
        for prefix, bounds in (("band_gap", query.band_gap), ("density", query.density)):
            if bounds.min is not None:
                criteria[f"{prefix}_min"] = bounds.min
            if bounds.max is not None:
                criteria[f"{prefix}_max"] = bounds.max
        return {"criteria": criteria, "properties": list(SUMMARY_PROPERTIES)}

    async def fetch_documents(self, query: SearchQuery) -> list[dict[str, Any]]:
        """Call the summary endpoint and return its raw documents.

        Raises:
            ProviderUnavailableError: If no API key is configured.
            ProviderFaultError: On a non-success status, transport failure,
                or a body that is not the expected JSON shape.
        """
        if not self._api_key:
            raise ProviderUnavailableError("Remote API key not configured")
        if not self._client:
            raise ProviderFaultError("Remote client not initialized. Call initialize() first.")

        body = self.build_request_body(query)

        try:
            start = time.monotonic()
            response = await self._client.post(self._summary_path, json=body)
            response.raise_for_status()
            took_ms = int((time.monotonic() - start) * 1000)
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderFaultError(
                f"Remote API error ({e.response.status_code}): {e.response.text[:_MAX_LOGGED_BODY]}"
            ) from e
        except httpx.RequestError as e:
            raise ProviderFaultError(f"Remote request failed: {e}") from e
        except ValueError as e:
            raise ProviderFaultError(f"Remote API returned invalid JSON: {e}") from e

        if isinstance(payload, dict) and isinstance(payload.get("data"), list):
            docs = payload["data"]
        elif isinstance(payload, list):
            docs = payload
        else:
            raise ProviderFaultError(f"Unexpected remote response shape: {str(payload)[:_MAX_LOGGED_BODY]}")

        logger.debug("Remote search: criteria=%s, results=%d, took=%dms", body["criteria"], len(docs), took_ms)
        return [doc for doc in docs if isinstance(doc, dict)]

    # ── Schema mapping ───────────────────────────────────────────────────

    def map_to_record(self, doc: dict[str, Any], index: int) -> Record:
        """Map one summary document to a ``Record``.

        Elastic moduli that have no dedicated ``Record`` field are kept in
        ``props`` under their provider names.
        """
        material_id = doc.get("material_id")
        remote_id = str(material_id) if material_id else None

        spacegroup = _dig(doc, "symmetry", "symbol") or _dig(doc, "spacegroup", "symbol")
        if spacegroup is None and isinstance(doc.get("spacegroup"), str):
            spacegroup = doc["spacegroup"]

        k_vrh = _first_number(_dig(doc, "elasticity", "K_VRH"), _dig(doc, "bulk_modulus", "vrh"))
        g_vrh = _first_number(_dig(doc, "elasticity", "G_VRH"), _dig(doc, "shear_modulus", "vrh"))

        return Record(
            id=remote_id or f"remote_{index}",
            source=Source.REMOTE,
            formula=doc.get("formula_pretty") or doc.get("formula") or "—",
            remote_id=remote_id,
            spacegroup=spacegroup,
            band_gap=coerce_number(doc.get("band_gap")),
            density=coerce_number(doc.get("density")),
            formation_energy=coerce_number(doc.get("formation_energy_per_atom")),
            youngs_modulus=coerce_number(_dig(doc, "elasticity", "E_Young")),
            bulk_modulus=k_vrh,
            poisson_ratio=_first_number(_dig(doc, "elasticity", "poisson_ratio"), doc.get("homogeneous_poisson")),
            fracture_toughness=None,
            props={"K_VRH": k_vrh, "G_VRH": g_vrh},
        )

    # ── Search ───────────────────────────────────────────────────────────

    async def search(self, query: SearchQuery) -> list[Record]:
        """Query the remote service; faults are logged and yield no records."""
        try:
            docs = await self.fetch_documents(query)
        except ProviderUnavailableError as e:
            logger.debug("Remote provider unavailable: %s", e)
            return []
        except ProviderFaultError as e:
            logger.error("Remote provider fault: %s", e)
            return []

        records: list[Record] = []
        for i, doc in enumerate(docs):
            try:
                records.append(self.map_to_record(doc, i))
            except ValidationError as e:
                logger.warning("Skipping malformed remote document %d: %s", i, e.errors()[0]["msg"])
        return [record for record in records if matches_ranges(record, query)]

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> AdapterHealth:
        """Check remote API reachability with a minimal query."""
        if not self._api_key:
            return AdapterHealth(status="disabled", message="No API key configured")
        if not self._client:
            return AdapterHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            response = await self._client.post(
                self._summary_path,
                json={"criteria": {"formula": "Si"}, "properties": ["material_id"]},
            )
            latency_ms = int((time.monotonic() - start) * 1000)

            if response.status_code == 200:
                return AdapterHealth(
                    status="healthy",
                    latency_ms=latency_ms,
                    last_check=datetime.now(UTC).isoformat(),
                    message=f"Endpoint: {self._base_url}{self._summary_path}",
                )
            return AdapterHealth(
                status="degraded",
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"HTTP {response.status_code}",
            )
        except Exception as e:
            return AdapterHealth(status="unhealthy", message=str(e))
