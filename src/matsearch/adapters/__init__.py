"""Provider adapter layer — Connectors for materials data sources.

Built-in adapters:
  - local: bulk JSON dataset, loaded once and filtered in memory
  - remote: Materials Project style summary API over HTTP

Implement ``MaterialsAdapter`` to connect another provider.
"""
