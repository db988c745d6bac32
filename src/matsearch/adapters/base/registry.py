"""Adapter Registry — Provider adapters known to the engine.

Adapter classes are registered under a source name (``"local"``,
``"remote"``); ``initialize_adapter`` then builds and starts an instance
from configuration. Only started adapters take part in searches.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from matsearch.adapters.base.adapter import AdapterHealth, MaterialsAdapter

logger = logging.getLogger(__name__)


class AdapterNotFoundError(Exception):
    """Raised when starting an adapter whose class was never registered."""


class AdapterRegistry:
    """Registered adapter classes and the instances started from them.

    Example:
        >>> registry = AdapterRegistry()
        >>> registry.register("local", LocalDatasetAdapter)
        >>> await registry.initialize_adapter("local", path="data/local_materials.json")
        >>> registry.find("local")
    """

    def __init__(self) -> None:
        self._classes: dict[str, type[MaterialsAdapter]] = {}
        self._instances: dict[str, MaterialsAdapter] = {}

    def register(self, name: str, adapter_class: type[MaterialsAdapter]) -> None:
        if name in self._classes:
            logger.warning("Replacing adapter class registered as '%s'", name)
        self._classes[name] = adapter_class
        logger.debug("Registered adapter class %s as '%s'", adapter_class.__name__, name)

    async def initialize_adapter(self, name: str, **kwargs: Any) -> MaterialsAdapter:
        """Construct the adapter registered as *name* and run its ``initialize``.

        The instance becomes active only once ``initialize`` returns; if it
        raises, nothing is stored and the exception propagates.

        Raises:
            AdapterNotFoundError: If *name* was never registered.
        """
        adapter_class = self._classes.get(name)
        if adapter_class is None:
            raise AdapterNotFoundError(f"No adapter registered with name '{name}'. Registered: {sorted(self._classes)}")

        adapter = adapter_class(**kwargs)
        await adapter.initialize()
        self._instances[name] = adapter
        logger.info("Adapter '%s' is active", name)
        return adapter

    def find(self, name: str) -> MaterialsAdapter | None:
        """Return the active adapter registered as *name*, or None."""
        return self._instances.get(name)

    async def health_check_all(self) -> dict[str, AdapterHealth]:
        """Run every active adapter's health check concurrently.

        A check that raises is reported as ``unhealthy`` with the error text.
        """
        names = list(self._instances)
        outcomes = await asyncio.gather(
            *(self._instances[name].health_check() for name in names),
            return_exceptions=True,
        )
        results: dict[str, AdapterHealth] = {}
        for name, outcome in zip(names, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                results[name] = AdapterHealth(status="unhealthy", message=str(outcome))
            else:
                results[name] = outcome
        return results

    async def shutdown_all(self) -> None:
        """Shut down active adapters, most recently started first."""
        for name in reversed(list(self._instances)):
            adapter = self._instances.pop(name)
            try:
                await adapter.shutdown()
            except Exception:
                logger.warning("Error shutting down adapter '%s'", name, exc_info=True)

    @property
    def registered_adapters(self) -> list[str]:
        return list(self._classes)

    @property
    def active_adapters(self) -> list[str]:
        return list(self._instances)
