"""Base adapter interface — Abstract classes for materials providers."""

from matsearch.adapters.base.adapter import AdapterHealth, MaterialsAdapter
from matsearch.adapters.base.registry import AdapterRegistry

__all__ = ["AdapterHealth", "AdapterRegistry", "MaterialsAdapter"]
