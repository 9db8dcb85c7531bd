from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ALLOWED_SORTS = ("time", "distance", "venue", "popularity")

DEFAULT_DISTANCE = 100
DEFAULT_LIMIT = 100
DEFAULT_VERSION = "v2.8"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Output ----------


class EventStats(_CamelModel):
    attending: int = 0
    declined: int = 0
    maybe: int = 0
    noreply: int = 0


class VenueSummary(_CamelModel):
    id: Optional[str] = None
    name: Optional[str] = None
    about: Optional[str] = None
    emails: Optional[List[str]] = None
    cover_picture: Optional[str] = None
    profile_picture: Optional[str] = None
    location: Optional[Dict[str, Any]] = None


class NormalizedEvent(_CamelModel):
    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    cover_picture: Optional[str] = None
    profile_picture: Optional[str] = None
    description: Optional[str] = None
    distance: Optional[int] = Field(
        default=None, description="Meters from the query point; null without venue location"
    )
    start_time: Optional[str] = Field(
        default=None, description="ISO8601 as returned upstream, e.g. 2017-03-04T20:00:00+0100"
    )
    end_time: Optional[str] = None
    time_from_now: Optional[float] = Field(
        default=None, description="Seconds until start; negative once started"
    )
    category: Optional[str] = None
    stats: EventStats = Field(default_factory=EventStats)
    venue: VenueSummary = Field(default_factory=VenueSummary)


class EventsResponse(BaseModel):
    events: List[NormalizedEvent] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    message: Any
    code: int


# ---------- Input ----------


def _split_csv(v: Any) -> Any:
    if isinstance(v, str):
        return [p.strip() for p in v.split(",") if p.strip()]
    return v


class SearchParameters(_CamelModel):
    """
    Options for a location search. Construction applies the documented
    defaults: falsy distance/limit/version fall back to 100/100/"v2.8",
    ``since`` defaults to now, and an unknown sort key becomes None.
    """

    lat: Optional[float] = None
    lng: Optional[float] = None
    lat_lan_array: List[float] = Field(default_factory=list)
    distance: int = Field(DEFAULT_DISTANCE, gt=0)
    limit: int = Field(DEFAULT_LIMIT, gt=0)
    access_token: Optional[str] = None
    query: str = ""
    sort: Optional[str] = None
    version: str = DEFAULT_VERSION
    since: Union[int, str] = Field(default_factory=lambda: int(round(time.time())))
    until: Optional[Union[int, str]] = None

    @field_validator("lat_lan_array", mode="before")
    @classmethod
    def _parse_lat_lan(cls, v: Any) -> Any:
        if v is None or v == "":
            return []
        if isinstance(v, str):
            # positional: an empty segment must fail, not shift the pairs
            parts = [p.strip() for p in v.split(",")]
            return parts[: len(parts) - len(parts) % 2]
        return v

    @field_validator("distance", mode="before")
    @classmethod
    def _distance_default(cls, v: Any) -> Any:
        return v or DEFAULT_DISTANCE

    @field_validator("limit", mode="before")
    @classmethod
    def _limit_default(cls, v: Any) -> Any:
        return v or DEFAULT_LIMIT

    @field_validator("version", mode="before")
    @classmethod
    def _version_default(cls, v: Any) -> Any:
        return v or DEFAULT_VERSION

    @field_validator("query", mode="before")
    @classmethod
    def _query_default(cls, v: Any) -> Any:
        return v or ""

    @field_validator("since", mode="before")
    @classmethod
    def _since_default(cls, v: Any) -> Any:
        return v or int(round(time.time()))

    @field_validator("until", mode="before")
    @classmethod
    def _until_default(cls, v: Any) -> Any:
        return v or None

    @field_validator("sort", mode="before")
    @classmethod
    def _coerce_sort(cls, v: Any) -> Optional[str]:
        # unknown keys silently mean "unsorted"
        if not v or not isinstance(v, str):
            return None
        s = v.strip().lower()
        return s if s in ALLOWED_SORTS else None

    @property
    def coordinates(self) -> List[Tuple[float, float]]:
        """(lat, lng) pairs; an odd trailing element is dropped."""
        arr = self.lat_lan_array
        pairs = [(arr[i], arr[i + 1]) for i in range(0, len(arr) - 1, 2)]
        if not pairs and self.lat is not None and self.lng is not None:
            pairs = [(self.lat, self.lng)]
        return pairs


class IdSearchParameters(SearchParameters):
    """Explicit venue/event id pairs, matched by position."""

    venue_id_array: List[str] = Field(default_factory=list)
    event_id_array: List[str] = Field(default_factory=list)

    @field_validator("venue_id_array", "event_id_array", mode="before")
    @classmethod
    def _parse_ids(cls, v: Any) -> Any:
        if v is None:
            return []
        return _split_csv(v)
