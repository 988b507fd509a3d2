"""Trip lookups and the departure-matching search.

``get_trip_by_departure`` finds the trip that leaves an origin stop for a
destination stop at an exact scheduled departure. It searches the departure
date first and then the previous service day, where the same instant is
written with an extended (>= 24:00:00) GTFS time.
"""
import logging
from typing import Dict, List, Optional, Sequence

from trip_resolver.core.errors import InvalidArgument
from trip_resolver.core.store import ScheduleStore
from trip_resolver.domain.models import Agency, Route, Stop, StopTime, Trip, sort_stop_times
from trip_resolver.services import calendar_service
from trip_resolver.utils.time_utils import (
    MAX_TIME_SECONDS,
    SECONDS_PER_DAY,
    DateInput,
    DateTime,
    parse_date,
)

logger = logging.getLogger("trip_resolver.trips")


def _int_or(value, default=None):
    return int(value) if value is not None else default


def _stop_time_from_row(row: Dict, date: Optional[int]) -> StopTime:
    stop = Stop(
        stop_id=str(row["stop_id"]),
        name=row.get("stop_name"),
        lat=row.get("stop_lat"),
        lon=row.get("stop_lon"),
        url=row.get("stop_url"),
        wheelchair_boarding=_int_or(row.get("wheelchair_boarding"), 0),
        parent_station=row.get("parent_station"),
    )
    return StopTime(
        stop=stop,
        arrival_time=row.get("arrival_time"),
        departure_time=row.get("departure_time"),
        stop_sequence=int(row["stop_sequence"]),
        arrival_time_seconds=_int_or(row.get("arrival_time_seconds")),
        departure_time_seconds=_int_or(row.get("departure_time_seconds")),
        pickup_type=_int_or(row.get("pickup_type"), 0),
        drop_off_type=_int_or(row.get("drop_off_type"), 0),
        date=date,
    )


def _route_from_rows(trip_row: Dict, route_row: Optional[Dict], agency_row: Optional[Dict]) -> Route:
    agency = None
    if agency_row is not None:
        agency = Agency(
            agency_id=agency_row.get("agency_id"),
            name=agency_row.get("agency_name"),
            url=agency_row.get("agency_url"),
            timezone=agency_row.get("agency_timezone"),
        )
    if route_row is None:
        return Route(route_id=str(trip_row["route_id"]), agency=agency)
    return Route(
        route_id=str(route_row["route_id"]),
        short_name=route_row.get("route_short_name"),
        long_name=route_row.get("route_long_name"),
        route_type=_int_or(route_row.get("route_type")),
        agency=agency,
        color=route_row.get("route_color"),
        text_color=route_row.get("route_text_color"),
    )


def _optional_date(date: Optional[DateInput]) -> Optional[int]:
    return parse_date(date) if date is not None else None


def get_stop_times_by_trip(store: ScheduleStore, trip_id: str, date: Optional[DateInput] = None) -> List[StopTime]:
    """The trip's stop times ordered by stop sequence, tagged with ``date``."""
    d = _optional_date(date)
    return sort_stop_times(_stop_time_from_row(r, d) for r in store.fetch_stop_times(trip_id))


def get_stop_time_by_trip_stop(
    store: ScheduleStore, trip_id: str, stop_id: str, date: Optional[DateInput] = None
) -> Optional[StopTime]:
    row = store.fetch_stop_time(trip_id, stop_id)
    if row is None:
        return None
    return _stop_time_from_row(row, _optional_date(date))


def get_trip(store: ScheduleStore, trip_id: str, date: Optional[DateInput] = None) -> Optional[Trip]:
    """Build the full Trip (route, agency, service, stop times) or None if unknown."""
    d = _optional_date(date)
    detail = store.fetch_trip_detail(trip_id)
    if detail is None:
        return None

    row = detail["trip"]
    service = None
    if row.get("service_id") is not None:
        service = calendar_service.get_service(store, str(row["service_id"]))

    return Trip(
        trip_id=str(row["trip_id"]),
        route=_route_from_rows(row, detail.get("route"), detail.get("agency")),
        service=service,
        stop_times=tuple(_stop_time_from_row(r, d) for r in detail["stop_times"]),
        short_name=row.get("trip_short_name"),
        headsign=row.get("trip_headsign"),
        direction_id=_int_or(row.get("direction_id")),
        block_id=row.get("block_id"),
        shape_id=row.get("shape_id"),
        wheelchair_accessible=_int_or(row.get("wheelchair_accessible"), 0),
        bikes_allowed=_int_or(row.get("bikes_allowed"), 0),
    )


def get_trip_by_short_name(store: ScheduleStore, short_name: str, date: DateInput) -> Optional[Trip]:
    """The first trip with ``short_name`` among the services running on ``date``."""
    if not short_name:
        raise InvalidArgument("Trip short name is required")
    d = parse_date(date)
    service_ids = calendar_service.get_service_ids_effective(store, d)
    trip_ids = store.fetch_trip_ids_by_short_name(short_name, service_ids)
    if not trip_ids:
        return None
    return get_trip(store, trip_ids[0], d)


def _find_matching_trip_id(
    store: ScheduleStore, origin_id: str, destination_id: str, departure: DateTime, service_ids: Sequence[str]
) -> Optional[str]:
    candidates = store.fetch_candidate_trips_by_origin_departure(
        origin_id, destination_id, departure.time, service_ids
    )
    logger.debug(f"{len(candidates)} candidate trips leaving {origin_id} at {departure}")

    # candidates are checked in store order; the first valid one wins
    for trip_id in candidates:
        if _visits_in_order(store.fetch_stop_times(trip_id), origin_id, destination_id, departure.time):
            return trip_id
        logger.debug(f"Trip {trip_id} rejected: {destination_id} is not after {origin_id}")
    return None


def _visits_in_order(rows: List[Dict], origin_id: str, destination_id: str, departure_seconds: int) -> bool:
    """Whether the trip reaches ``destination_id`` after leaving ``origin_id`` at ``departure_seconds``.

    A trip may visit a stop more than once, so the origin is the visit that
    departs at the queried time, not the first visit of the stop.
    """
    rows = sorted(rows, key=lambda r: int(r["stop_sequence"]))
    origin_seq = None
    for r in rows:
        if r["stop_id"] == origin_id and r.get("departure_time_seconds") == departure_seconds:
            origin_seq = int(r["stop_sequence"])
            break
    if origin_seq is None:
        return False
    return any(r["stop_id"] == destination_id and int(r["stop_sequence"]) > origin_seq for r in rows)


def _search_departure(store: ScheduleStore, origin_id: str, destination_id: str, departure: DateTime) -> Optional[Trip]:
    service_ids = calendar_service.get_service_ids_effective(store, departure.date)
    trip_id = _find_matching_trip_id(store, origin_id, destination_id, departure, service_ids)
    if trip_id is None:
        return None
    return get_trip(store, trip_id, departure.date)


def get_trip_by_departure(
    store: ScheduleStore, origin_id: str, destination_id: str, departure: DateTime
) -> Optional[Trip]:
    """Find the trip leaving ``origin_id`` for ``destination_id`` at ``departure``.

    The departure date is searched first. When nothing matches, the search is
    repeated on the previous day with the time shifted by 24 hours, which
    finds late-night trips published under the previous service day. Returns
    None when neither search matches.
    """
    if not origin_id or not destination_id:
        raise InvalidArgument("Could not get Trip, origin and/or destination id not set")
    if not departure.is_date_set:
        raise InvalidArgument("Could not get Trip, departure date not set")

    trip = _search_departure(store, origin_id, destination_id, departure)
    if trip is not None:
        logger.info(f"Matched trip {trip.trip_id}: {origin_id} -> {destination_id} at {departure}")
        return trip

    shifted = departure.time + SECONDS_PER_DAY
    if shifted > MAX_TIME_SECONDS:
        # not expressible as an extended time of the previous service day
        logger.debug(f"No match for {origin_id} -> {destination_id} at {departure}")
        return None
    previous = DateTime(shifted, departure.add_days(-1).date)

    logger.debug(f"No same-day match for {origin_id} -> {destination_id} at {departure}; trying {previous}")
    trip = _search_departure(store, origin_id, destination_id, previous)
    if trip is not None:
        logger.info(f"Matched trip {trip.trip_id} on previous service day: {origin_id} -> {destination_id} at {previous}")
    return trip
