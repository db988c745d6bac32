"""MatSearch Engine — Aggregates local and remote materials providers.

The engine manages the request lifecycle:
  1. Dispatch: Query every provider in the request's dataset scope, concurrently
  2. Containment: A failing provider contributes nothing; the other is unaffected
  3. Merge: Local results first, then remote
  4. Deduplicate: First record per dedup key wins
  5. Rank: Stable sort by lexical/source relevance
  6. Paginate: Clamp the page request and slice
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from matsearch.adapters.base.registry import AdapterRegistry
from matsearch.adapters.local.adapter import LocalDatasetAdapter
from matsearch.adapters.remote.adapter import MaterialsProjectAdapter
from matsearch.core.pagination import clamp_page, paginate
from matsearch.core.ranking import deduplicate, rank
from matsearch.models.query import DatasetScope, SearchQuery
from matsearch.models.record import Record, Source
from matsearch.models.response import SearchResult

if TYPE_CHECKING:
    from matsearch.config.settings import Settings

logger = logging.getLogger(__name__)

# Merge order: local contributions always precede remote ones.
_DISPATCH_ORDER = (Source.LOCAL, Source.REMOTE)

_SCOPE_SOURCES: dict[DatasetScope, frozenset[Source]] = {
    DatasetScope.ALL: frozenset({Source.LOCAL, Source.REMOTE}),
    DatasetScope.LOCAL: frozenset({Source.LOCAL}),
    DatasetScope.REMOTE: frozenset({Source.REMOTE}),
}


class MaterialsSearchEngine:
    """Aggregator over the local dataset and remote property service.

    Pipeline:
      SearchQuery → [local adapter ∥ remote adapter] → merge
                  → dedup → rank → paginate → SearchResult

    Adapters are looked up in ``adapter_registry`` under the name of the
    source they serve (``"local"``, ``"remote"``). A source with no active
    adapter simply contributes nothing.

    Attributes:
        settings: Application configuration.
        adapter_registry: Registry of provider adapters.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.adapter_registry = AdapterRegistry()

    async def initialize(self) -> None:
        """Register and initialise the providers enabled in settings."""
        providers: list[tuple[str, Any, dict[str, Any]]] = []
        if self.settings.local.enabled:
            providers.append(("local", LocalDatasetAdapter, {"path": self.settings.local.path}))
        else:
            logger.info("Local provider is disabled, skipping")
        if self.settings.remote.enabled:
            remote = self.settings.remote
            providers.append(
                (
                    "remote",
                    MaterialsProjectAdapter,
                    {
                        "base_url": remote.base_url,
                        "api_key": remote.api_key,
                        "summary_path": remote.summary_path,
                        "timeout": remote.timeout,
                    },
                )
            )
        else:
            logger.info("Remote provider is disabled, skipping")

        for name, adapter_class, kwargs in providers:
            self.adapter_registry.register(name, adapter_class)
            try:
                await self.adapter_registry.initialize_adapter(name, **kwargs)
            except Exception:
                logger.warning("Failed to initialise adapter '%s'", name, exc_info=True)

        logger.info("MatSearch engine initialized (active adapters: %s)", self.adapter_registry.active_adapters)

    async def shutdown(self) -> None:
        """Gracefully shut down all components."""
        await self.adapter_registry.shutdown_all()
        logger.info("MatSearch engine shut down")

    async def search(self, query: SearchQuery) -> SearchResult:
        """Run one aggregated search.

        Provider failures never escape this method; the result is always a
        well-formed (possibly empty) ``SearchResult``.

        Args:
            query: A validated search query.

        Returns:
            The requested page plus the total number of matches.
        """
        start_time = time.monotonic()

        candidates = await self._execute_searches(query)
        unique = deduplicate(candidates)
        ranked = rank(unique, query.needle)
        page, page_size = clamp_page(query.page, query.page_size)
        items = paginate(ranked, page, page_size)

        logger.info(
            "Search complete: q=%s, dataset=%s, candidates=%d, total=%d, page=%d, items=%d in %d ms",
            query.q,
            query.dataset.value,
            len(candidates),
            len(ranked),
            page,
            len(items),
            int((time.monotonic() - start_time) * 1000),
        )

        return SearchResult(total=len(ranked), items=items)

    async def _execute_searches(self, query: SearchQuery) -> list[Record]:
        """Query in-scope providers concurrently and merge in dispatch order.

        Out-of-scope and inactive providers are not invoked. A provider that
        raises is logged and contributes an empty list.
        """
        wanted = _SCOPE_SOURCES[query.dataset]

        tasks: list[asyncio.Future[list[Record]]] = []
        task_meta: list[str] = []

        for source in _DISPATCH_ORDER:
            if source not in wanted:
                continue
            adapter = self.adapter_registry.find(source.value)
            if adapter is None:
                logger.debug("No active adapter for source '%s', contributing no results", source.value)
                continue
            tasks.append(asyncio.ensure_future(adapter.search(query)))
            task_meta.append(adapter.name)

        raw_results: list[Any] = await asyncio.gather(*tasks, return_exceptions=True)

        merged: list[Record] = []
        for adapter_name, result in zip(task_meta, raw_results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("Search failed on adapter '%s': %s", adapter_name, result, exc_info=result)
                continue
            merged.extend(result)

        return merged
