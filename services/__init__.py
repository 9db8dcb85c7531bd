"""
Service package marker.

Intentionally empty to avoid heavy imports at package import time.
Import the concrete modules directly, e.g.:

    from services.aggregator import EventSearch
    from services.sorting import sort_events
    from services.errors import SearchError
"""
__all__: list[str] = []
