from conftest import FUTURE_START, PAST_START, graph_event, graph_venue

from services.normalize import (
    build_event,
    build_venue,
    parse_start_time,
    time_from_now,
    venue_distance,
)

NOW = 1500000000
ORIGIN = (52.52, 13.405)


def test_parse_graph_offset_without_colon():
    dt = parse_start_time("2017-07-14T03:40:00+0100")
    assert dt is not None
    assert dt.timestamp() == NOW


def test_parse_rejects_garbage():
    assert parse_start_time("soon") is None
    assert parse_start_time(None) is None


def test_time_from_now_sign():
    assert time_from_now(NOW, "2017-07-14T03:41:00+0100") == 60
    assert time_from_now(NOW, "2017-07-14T03:39:00+0100") == -60
    assert time_from_now(NOW, None) is None


def test_distance_is_non_negative_int_or_none():
    d = venue_distance({"latitude": 52.52, "longitude": 13.415}, ORIGIN)
    assert isinstance(d, int) and d > 0
    assert venue_distance({"latitude": 52.52, "longitude": 13.405}, ORIGIN) == 0
    assert venue_distance(None, ORIGIN) is None
    assert venue_distance({"city": "Berlin"}, ORIGIN) is None
    assert venue_distance({"latitude": 1, "longitude": 2}, None) is None


def test_build_event_maps_all_fields():
    raw_venue = graph_venue("v1", [], location={"latitude": 52.52, "longitude": 13.405})
    venue = build_venue(raw_venue, venue_id="v1")
    ev = build_event(graph_event("e1", attending=3, maybe=2), venue, origin=ORIGIN, now=NOW)

    assert ev.id == "e1"
    assert ev.name == "Event e1"
    assert ev.cover_picture == "https://img.test/e1.jpg"
    assert ev.profile_picture == "https://img.test/e1_p.jpg"
    assert ev.distance == 0
    assert ev.start_time == FUTURE_START
    assert ev.time_from_now > 0
    assert ev.category == "MUSIC_EVENT"
    assert ev.stats.attending == 3 and ev.stats.maybe == 2
    assert ev.stats.declined == 1 and ev.stats.noreply == 7
    assert ev.venue.id == "v1"
    assert ev.venue.emails == ["info@v1.test"]
    assert ev.venue.cover_picture == "https://img.test/v1.jpg"
    assert ev.venue.profile_picture == "https://img.test/v1_p.jpg"
    assert ev.venue.location == {"latitude": 52.52, "longitude": 13.405}


def test_build_event_missing_optionals_are_null():
    venue = build_venue({"name": "Bare"}, venue_id="v9")
    ev = build_event({"id": "e9", "start_time": PAST_START}, venue, origin=ORIGIN, now=NOW)
    assert ev.cover_picture is None
    assert ev.profile_picture is None
    assert ev.description is None
    assert ev.distance is None
    assert ev.time_from_now < 0
    assert ev.stats.attending == 0
    assert ev.venue.about is None and ev.venue.location is None


def test_serializes_with_camel_case_keys():
    venue = build_venue(graph_venue("v1", []), venue_id="v1")
    out = build_event(graph_event("e1"), venue, origin=ORIGIN, now=NOW).model_dump(by_alias=True)
    assert {"coverPicture", "profilePicture", "startTime", "endTime", "timeFromNow"} <= set(out)
    assert "coverPicture" in out["venue"]


def test_build_venue_location_override():
    raw = graph_venue("v1", [], location={"latitude": 0, "longitude": 0})
    venue = build_venue(raw, location={"latitude": 52.52, "longitude": 13.405})
    assert venue.location == {"latitude": 52.52, "longitude": 13.405}
    assert build_venue(raw).location == {"latitude": 0, "longitude": 0}
