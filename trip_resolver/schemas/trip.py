from pydantic import BaseModel
from typing import List, Optional

from trip_resolver.domain.models import Route, StopTime, Trip
from trip_resolver.schemas.service import ServiceOut, serialize_service


class AgencyOut(BaseModel):
    agency_id: Optional[str] = None
    agency_name: Optional[str] = None
    agency_url: Optional[str] = None
    agency_timezone: Optional[str] = None


class RouteOut(BaseModel):
    route_id: str
    route_short_name: Optional[str] = None
    route_long_name: Optional[str] = None
    route_type: Optional[int] = None
    route_color: Optional[str] = None
    route_text_color: Optional[str] = None
    agency: Optional[AgencyOut] = None


class StopTimeOut(BaseModel):
    stop_id: str
    stop_name: Optional[str] = None
    stop_lat: Optional[float] = None
    stop_lon: Optional[float] = None
    stop_sequence: int
    arrival_time: Optional[str] = None
    departure_time: Optional[str] = None
    arrival_time_seconds: Optional[int] = None
    departure_time_seconds: Optional[int] = None
    pickup_type: int = 0
    drop_off_type: int = 0
    # ISO 8601 instants, only when the stop time is tied to a service date
    arrival: Optional[str] = None
    departure: Optional[str] = None


class TripOut(BaseModel):
    trip_id: str
    trip_short_name: Optional[str] = None
    trip_headsign: Optional[str] = None
    direction_id: Optional[int] = None
    block_id: Optional[str] = None
    shape_id: Optional[str] = None
    wheelchair_accessible: int = 0
    bikes_allowed: int = 0
    route: RouteOut
    service: Optional[ServiceOut] = None
    stop_times: List[StopTimeOut] = []


def _iso(dt) -> Optional[str]:
    if dt is None or not dt.is_date_set:
        return None
    return dt.to_iso_string()


def serialize_route(route: Route) -> dict:
    agency = None
    if route.agency is not None:
        agency = {
            "agency_id": route.agency.agency_id,
            "agency_name": route.agency.name,
            "agency_url": route.agency.url,
            "agency_timezone": route.agency.timezone,
        }
    return {
        "route_id": route.route_id,
        "route_short_name": route.short_name,
        "route_long_name": route.long_name,
        "route_type": route.route_type,
        "route_color": route.color,
        "route_text_color": route.text_color,
        "agency": agency,
    }


def serialize_stop_time(st: StopTime) -> dict:
    return {
        "stop_id": st.stop_id,
        "stop_name": st.stop.name,
        "stop_lat": st.stop.lat,
        "stop_lon": st.stop.lon,
        "stop_sequence": st.stop_sequence,
        "arrival_time": st.arrival_time,
        "departure_time": st.departure_time,
        "arrival_time_seconds": st.arrival_time_seconds,
        "departure_time_seconds": st.departure_time_seconds,
        "pickup_type": int(st.pickup_type),
        "drop_off_type": int(st.drop_off_type),
        "arrival": _iso(st.arrival),
        "departure": _iso(st.departure),
    }


def serialize_trip(trip: Trip) -> dict:
    return {
        "trip_id": trip.trip_id,
        "trip_short_name": trip.short_name,
        "trip_headsign": trip.headsign,
        "direction_id": trip.direction_id,
        "block_id": trip.block_id,
        "shape_id": trip.shape_id,
        "wheelchair_accessible": int(trip.wheelchair_accessible),
        "bikes_allowed": int(trip.bikes_allowed),
        "route": serialize_route(trip.route),
        "service": serialize_service(trip.service) if trip.service is not None else None,
        "stop_times": [serialize_stop_time(st) for st in trip.stop_times],
    }
