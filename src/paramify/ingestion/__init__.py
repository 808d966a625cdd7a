"""Ingestion layer.

Adapters that fetch gauge data from external providers and emit normalized
:class:`paramify.models.flood.FloodData` readings.
"""

__all__: list[str] = []
