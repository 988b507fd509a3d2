import os

import pandas as pd
import pytest

from trip_resolver.core.gtfs_sqlite import GTFSStore
from trip_resolver.core.gtfs_sqlite_loader import build_sqlite_from_dict

# 2024-03-04 is a Monday, 2024-03-05 a Tuesday
MONDAY = 20240304
TUESDAY = 20240305

WEEKDAYS = {"monday": 1, "tuesday": 1, "wednesday": 1, "thursday": 1, "friday": 1, "saturday": 0, "sunday": 0}
SATURDAY_ONLY = {"monday": 0, "tuesday": 0, "wednesday": 0, "thursday": 0, "friday": 0, "saturday": 1, "sunday": 0}


def _stop_times(trip_id, *visits):
    """visits: (stop_id, stop_sequence, time) with arrival == departure."""
    return [
        {"trip_id": trip_id, "stop_id": stop_id, "stop_sequence": seq, "arrival_time": t, "departure_time": t}
        for stop_id, seq, t in visits
    ]


def feed_tables():
    """Small deterministic feed shared by the store, service and API tests."""
    agency = pd.DataFrame([
        {"agency_id": "AG", "agency_name": "Test Rail", "agency_url": "https://example.org", "agency_timezone": "Europe/Madrid"},
    ])
    routes = pd.DataFrame([
        {"route_id": "R1", "agency_id": "AG", "route_short_name": "C1", "route_long_name": "Alpha - Charlie", "route_type": 2},
    ])
    stops = pd.DataFrame([
        {"stop_id": "A", "stop_name": "Alpha", "stop_lat": 40.0, "stop_lon": -3.0},
        {"stop_id": "B", "stop_name": "Bravo", "stop_lat": 40.1, "stop_lon": -3.1},
        {"stop_id": "C", "stop_name": "Charlie", "stop_lat": 40.2, "stop_lon": -3.2},
    ])
    calendar = pd.DataFrame([
        {"service_id": "S1", **WEEKDAYS, "start_date": "20240101", "end_date": "20241231"},
        {"service_id": "S2", **SATURDAY_ONLY, "start_date": "20240101", "end_date": "20241231"},
        {"service_id": "S3", **WEEKDAYS, "start_date": "20240101", "end_date": "20241231"},
    ])
    calendar_dates = pd.DataFrame([
        {"service_id": "S1", "date": "20240304", "exception_type": 2},
        {"service_id": "S2", "date": "20240304", "exception_type": 1},
        # duplicate row, must be harmless
        {"service_id": "S2", "date": "20240304", "exception_type": 1},
        # service only known through calendar_dates
        {"service_id": "HOLIDAY", "date": "20240319", "exception_type": 1},
    ])
    trips = pd.DataFrame([
        {"trip_id": "T1", "route_id": "R1", "service_id": "S3", "trip_short_name": "1001", "trip_headsign": "Charlie", "direction_id": 0},
        # visits A after B
        {"trip_id": "T3", "route_id": "R1", "service_id": "S3", "trip_short_name": "1003", "trip_headsign": "Alpha", "direction_id": 1},
        # published on the previous service day with extended times
        {"trip_id": "T4", "route_id": "R1", "service_id": "S3", "trip_short_name": "1004", "trip_headsign": "Bravo", "direction_id": 0},
        {"trip_id": "T5", "route_id": "R1", "service_id": "S1", "trip_short_name": "1005", "direction_id": 0},
        {"trip_id": "T6", "route_id": "R1", "service_id": "S1", "trip_short_name": "1006", "direction_id": 0},
        {"trip_id": "T7", "route_id": "R1", "service_id": "S2", "trip_short_name": "SAT1", "direction_id": 0},
        # loops that visit a stop twice
        {"trip_id": "L1", "route_id": "R1", "service_id": "S3", "trip_short_name": "2001", "direction_id": 0},
        {"trip_id": "L2", "route_id": "R1", "service_id": "S3", "trip_short_name": "2002", "direction_id": 0},
    ])
    stop_times = pd.DataFrame(
        # T1 rows out of sequence order on purpose
        _stop_times("T1", ("B", 2, "08:30:00"), ("A", 1, "08:00:00"), ("C", 3, "09:00:00"))
        + _stop_times("T3", ("B", 1, "09:30:00"), ("A", 2, "10:00:00"))
        + _stop_times("T4", ("A", 1, "25:30:00"), ("B", 2, "26:00:00"))
        + _stop_times("T5", ("A", 1, "12:00:00"), ("B", 2, "12:20:00"))
        + _stop_times("T6", ("A", 1, "12:00:00"), ("B", 2, "12:25:00"))
        + _stop_times("T7", ("A", 1, "07:00:00"), ("C", 2, "08:00:00"))
        + _stop_times("L1", ("A", 1, "13:00:00"), ("B", 2, "13:30:00"), ("A", 3, "14:00:00"))
        + _stop_times("L2", ("B", 1, "15:00:00"), ("A", 2, "15:30:00"), ("B", 3, "16:00:00"))
    )
    return {
        "agency": agency,
        "routes": routes,
        "stops": stops,
        "calendar": calendar,
        "calendar_dates": calendar_dates,
        "trips": trips,
        "stop_times": stop_times,
    }


@pytest.fixture
def db_path(tmp_path):
    path = os.path.join(str(tmp_path), "gtfs.db")
    build_sqlite_from_dict(feed_tables(), path)
    return path


@pytest.fixture
def store(db_path):
    return GTFSStore(db_path)
