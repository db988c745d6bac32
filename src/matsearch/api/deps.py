"""API dependencies — The engine shared by all request handlers."""

from __future__ import annotations

from matsearch.core.engine import MaterialsSearchEngine

_engine: MaterialsSearchEngine | None = None


def set_engine(engine: MaterialsSearchEngine | None) -> None:
    """Install (or, with ``None``, remove) the engine served by the API."""
    global _engine
    _engine = engine


def get_engine() -> MaterialsSearchEngine:
    """FastAPI dependency returning the installed engine.

    Raises:
        RuntimeError: If called outside the application lifespan and no engine
            was installed with ``set_engine``.
    """
    if _engine is None:
        raise RuntimeError("MatSearch engine not initialized. Is the server running?")
    return _engine
