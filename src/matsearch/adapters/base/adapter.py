"""Base provider adapter — Abstract interface for all materials data sources.

Every provider must implement this interface to take part in aggregation.
The adapter is responsible for:
  1. Turning a ``SearchQuery`` into candidate records from its source
  2. Normalizing the source's fields into ``Record``
  3. Applying any filter its source cannot be trusted to apply
  4. Reporting health status
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from matsearch.models.query import SearchQuery
from matsearch.models.record import Record, Source


class AdapterHealth(BaseModel):
    """Health status of a provider adapter."""

    status: str = Field(description="Health status: healthy, degraded, unhealthy, disabled")
    latency_ms: int = Field(default=0, description="Latency of last health check in ms")
    last_check: str | None = Field(default=None, description="ISO timestamp of last health check")
    record_count: int | None = Field(default=None, description="Records held in memory, when applicable")
    message: str | None = Field(default=None, description="Additional health message")


class MaterialsAdapter(ABC):
    """Abstract base class for materials provider adapters.

    All adapters must implement:
      - search(): Return normalized, filtered candidate records for a query
      - health_check(): Report adapter health status

    ``search`` is expected to contain its own source faults (bad responses,
    unreadable data) and return an empty list for them. The engine still
    guards every call, so an exception that slips through only costs that
    adapter's contribution.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique adapter name (e.g., 'local', 'remote')."""

    @property
    @abstractmethod
    def source(self) -> Source:
        """Source tag stamped on every record this adapter produces."""

    async def initialize(self) -> None:
        """Prepare the adapter (clients, pools, etc.).

        Called once during application startup.
        """

    async def shutdown(self) -> None:
        """Release resources held by the adapter."""

    @abstractmethod
    async def search(self, query: SearchQuery) -> list[Record]:
        """Return records from this source that match *query*.

        Args:
            query: The caller's search query.

        Returns:
            Normalized records, in the source's own order.
        """

    @abstractmethod
    async def health_check(self) -> AdapterHealth:
        """Check the health of the provider.

        Returns:
            Current health status of the adapter.
        """
