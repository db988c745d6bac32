"""MatSearch — Aggregated search over local and remote materials-science data."""

__version__ = "0.1.0"
