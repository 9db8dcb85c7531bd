from __future__ import annotations

from functools import cmp_to_key
from typing import Callable, Dict, List, Optional

from schemas import NormalizedEvent

Comparator = Callable[[NormalizedEvent, NormalizedEvent], int]


def _cmp(a, b) -> int:
    # None sorts after every value
    if a is None or b is None:
        return (a is None) - (b is None)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def compare_time(a: NormalizedEvent, b: NormalizedEvent) -> int:
    return _cmp(a.time_from_now, b.time_from_now)


def compare_distance(a: NormalizedEvent, b: NormalizedEvent) -> int:
    da = int(a.distance) if a.distance is not None else None
    db = int(b.distance) if b.distance is not None else None
    return _cmp(da, db)


def compare_venue(a: NormalizedEvent, b: NormalizedEvent) -> int:
    return _cmp(a.venue.name, b.venue.name)


def popularity_score(e: NormalizedEvent) -> float:
    return e.stats.attending + e.stats.maybe / 2


def compare_popularity(a: NormalizedEvent, b: NormalizedEvent) -> int:
    """Higher score first."""
    return -_cmp(popularity_score(a), popularity_score(b))


COMPARATORS: Dict[str, Comparator] = {
    "time": compare_time,
    "distance": compare_distance,
    "venue": compare_venue,
    "popularity": compare_popularity,
}


def sort_events(events: List[NormalizedEvent], sort: Optional[str]) -> List[NormalizedEvent]:
    """Stable in-place sort by the named comparator; unknown or None is a no-op."""
    cmp = COMPARATORS.get(sort or "")
    if cmp is not None:
        events.sort(key=cmp_to_key(cmp))
    return events
