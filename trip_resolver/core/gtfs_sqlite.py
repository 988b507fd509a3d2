import logging
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from trip_resolver.core.errors import StoreError
from trip_resolver.core.store import ScheduleStore
from trip_resolver.utils.time_utils import DAYS_OF_WEEK

logger = logging.getLogger("trip_resolver.store")

_CALENDAR_COLUMNS = (
    "service_id, monday, tuesday, wednesday, thursday, friday, saturday, sunday, start_date, end_date"
)

_STOP_TIME_SELECT = (
    "SELECT st.trip_id, st.arrival_time, st.departure_time, st.arrival_time_seconds, "
    "st.departure_time_seconds, st.stop_sequence, st.pickup_type, st.drop_off_type, "
    "st.stop_id, s.stop_name, s.stop_lat, s.stop_lon, s.stop_url, s.wheelchair_boarding, s.parent_station "
    "FROM stop_times st "
    "LEFT JOIN stops s ON st.stop_id = s.stop_id "
)


def _placeholders(values: Sequence) -> str:
    return ",".join("?" for _ in values)


class GTFSStore(ScheduleStore):
    """A thin SQLite-backed GTFS store wrapper.

    The database is the one written by ``gtfs_sqlite_loader.build_sqlite_from_dict``.
    Each query opens its own read-only connection.

    Usage:
      store = GTFSStore(path_to_db)
      store.fetch_exceptions_on_date(20240304)
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _connect(self):
        # Open connection with row factory for dict-like rows
        uri = f"{Path(self.db_path).resolve().as_uri()}?mode=ro"
        conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _select(self, q: str, params: Sequence = ()) -> List[Dict]:
        try:
            conn = self._connect()
            try:
                cur = conn.execute(q, tuple(params))
                return [dict(r) for r in cur.fetchall()]
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Query failed on {self.db_path}: {e}")
            raise StoreError(f"Schedule store query failed: {e}") from e

    def _select_one(self, q: str, params: Sequence = ()) -> Optional[Dict]:
        rows = self._select(q, params)
        return rows[0] if rows else None

    # calendar

    def fetch_weekday_services(self, date: int, dow: str) -> List[Dict]:
        if dow not in DAYS_OF_WEEK:
            raise ValueError(f"Unknown day of week: {dow}")
        q = (
            f"SELECT {_CALENDAR_COLUMNS} FROM calendar "
            f"WHERE {dow} = 1 AND start_date <= ? AND end_date >= ? ORDER BY rowid"
        )
        return self._select(q, (date, date))

    def fetch_exceptions_on_date(self, date: int) -> List[Dict]:
        q = "SELECT service_id, date, exception_type FROM calendar_dates WHERE date = ? ORDER BY rowid"
        return self._select(q, (date,))

    def fetch_service_pattern(self, service_id: str) -> Optional[Dict]:
        q = f"SELECT {_CALENDAR_COLUMNS} FROM calendar WHERE service_id = ? ORDER BY rowid LIMIT 1"
        return self._select_one(q, (service_id,))

    def fetch_service_exceptions(self, service_id: str) -> List[Dict]:
        q = (
            "SELECT service_id, date, exception_type FROM calendar_dates "
            "WHERE service_id = ? ORDER BY date ASC, rowid ASC"
        )
        return self._select(q, (service_id,))

    # trips

    def fetch_candidate_trips_by_origin_departure(
        self, origin_id: str, destination_id: str, departure_seconds: int, service_ids: Sequence[str]
    ) -> List[str]:
        if not service_ids:
            return []
        q = (
            "SELECT t.trip_id FROM trips t "
            f"WHERE t.service_id IN ({_placeholders(service_ids)}) "
            "AND t.trip_id IN (SELECT trip_id FROM stop_times WHERE stop_id = ?) "
            "AND t.trip_id IN ("
            "SELECT trip_id FROM stop_times WHERE stop_id = ? AND departure_time_seconds = ?"
            ") ORDER BY t.rowid"
        )
        params = [*service_ids, destination_id, origin_id, departure_seconds]
        return [r["trip_id"] for r in self._select(q, params)]

    def fetch_trip_ids_by_short_name(self, short_name: str, service_ids: Sequence[str]) -> List[str]:
        if not service_ids:
            return []
        q = (
            "SELECT trip_id FROM trips WHERE trip_short_name = ? "
            f"AND service_id IN ({_placeholders(service_ids)}) ORDER BY rowid"
        )
        return [r["trip_id"] for r in self._select(q, [short_name, *service_ids])]

    def fetch_stop_time(self, trip_id: str, stop_id: str) -> Optional[Dict]:
        # a trip visiting the stop twice yields its earliest visit
        q = _STOP_TIME_SELECT + "WHERE st.trip_id = ? AND st.stop_id = ? ORDER BY st.stop_sequence LIMIT 1"
        return self._select_one(q, (trip_id, stop_id))

    def fetch_stop_times(self, trip_id: str) -> List[Dict]:
        q = _STOP_TIME_SELECT + "WHERE st.trip_id = ? ORDER BY st.rowid"
        return self._select(q, (trip_id,))

    def fetch_trip_detail(self, trip_id: str) -> Optional[Dict]:
        trip = self._select_one(
            "SELECT trip_id, route_id, service_id, trip_short_name, trip_headsign, direction_id, "
            "block_id, shape_id, wheelchair_accessible, bikes_allowed FROM trips WHERE trip_id = ? LIMIT 1",
            (trip_id,),
        )
        if trip is None:
            return None

        route = self._select_one(
            "SELECT route_id, agency_id, route_short_name, route_long_name, route_type, route_color, "
            "route_text_color FROM routes WHERE route_id = ? LIMIT 1",
            (trip["route_id"],),
        )

        agency = None
        agency_q = "SELECT agency_id, agency_name, agency_url, agency_timezone FROM agency "
        if route is not None and route.get("agency_id"):
            agency = self._select_one(agency_q + "WHERE agency_id = ? LIMIT 1", (route["agency_id"],))
        else:
            # agency_id is optional in feeds with a single agency
            agency = self._select_one(agency_q + "ORDER BY rowid LIMIT 1")

        return {
            "trip": trip,
            "route": route,
            "agency": agency,
            "stop_times": self.fetch_stop_times(trip_id),
        }
