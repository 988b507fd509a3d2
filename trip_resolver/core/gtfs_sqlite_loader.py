import logging
import sqlite3
from typing import Dict, List, Optional

import pandas as pd

from trip_resolver.core.errors import ParseError
from trip_resolver.utils.time_utils import parse_time

logger = logging.getLogger("trip_resolver.loader")

_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

# Order matters for foreign key relationships
TABLE_COLUMNS: Dict[str, List[str]] = {
    "agency": ["agency_id", "agency_name", "agency_url", "agency_timezone"],
    "routes": ["route_id", "agency_id", "route_short_name", "route_long_name", "route_type", "route_color", "route_text_color"],
    "calendar": ["service_id", *_WEEKDAYS, "start_date", "end_date"],
    "calendar_dates": ["service_id", "date", "exception_type"],
    "stops": ["stop_id", "stop_name", "stop_lat", "stop_lon", "stop_url", "wheelchair_boarding", "parent_station"],
    "trips": [
        "trip_id", "route_id", "service_id", "trip_short_name", "trip_headsign", "direction_id",
        "block_id", "shape_id", "wheelchair_accessible", "bikes_allowed",
    ],
    "stop_times": ["trip_id", "arrival_time", "departure_time", "stop_id", "stop_sequence", "pickup_type", "drop_off_type"],
}

TEXT_COLUMNS: Dict[str, List[str]] = {
    "agency": ["agency_id"],
    "routes": ["route_id", "agency_id"],
    "calendar": ["service_id"],
    "calendar_dates": ["service_id"],
    "stops": ["stop_id", "parent_station"],
    "trips": ["trip_id", "route_id", "service_id", "trip_short_name", "block_id", "shape_id"],
    "stop_times": ["trip_id", "stop_id", "arrival_time", "departure_time"],
}

# integer columns and the value used where the feed leaves them empty
INT_COLUMNS: Dict[str, Dict[str, Optional[int]]] = {
    "routes": {"route_type": None},
    "calendar": {**{d: 0 for d in _WEEKDAYS}, "start_date": None, "end_date": None},
    "calendar_dates": {"date": None, "exception_type": None},
    "stops": {"wheelchair_boarding": 0},
    "trips": {"direction_id": None, "wheelchair_accessible": 0, "bikes_allowed": 0},
    "stop_times": {"stop_sequence": None, "pickup_type": 0, "drop_off_type": 0},
}

INDEXES = [
    ("ix_agency_id", "agency", "agency_id"),
    ("ix_routes_route_id", "routes", "route_id"),
    ("ix_calendar_service_id", "calendar", "service_id"),
    ("ix_calendar_dates", "calendar", "start_date, end_date"),
    ("ix_calendar_dates_service_id", "calendar_dates", "service_id, date"),
    ("ix_calendar_dates_date", "calendar_dates", "date"),
    ("ix_stops_stop_id", "stops", "stop_id"),
    ("ix_trips_trip_id", "trips", "trip_id"),
    ("ix_trips_service_id", "trips", "service_id"),
    ("ix_trips_short_name", "trips", "trip_short_name"),
    ("ix_stop_times_trip_id", "stop_times", "trip_id"),
    ("ix_stop_times_trip_stop", "stop_times", "trip_id, stop_id"),
    # origin lookup of the departure search
    ("ix_stop_times_stop_departure", "stop_times", "stop_id, departure_time_seconds"),
]


def _to_text(v):
    if v is None or (not isinstance(v, str) and pd.isna(v)):
        return None
    return str(v).strip()


def _seconds_column(values: pd.Series, column: str) -> pd.Series:
    """Parse a GTFS time column into seconds since midnight.

    Empty values (non-timepoint stops) stay NULL; malformed ones abort the build.
    """

    def convert(v):
        # blank cells may come back as None or NaN depending on the pandas version
        if pd.isna(v) or v == "":
            return None
        try:
            return parse_time(v)
        except ParseError:
            logger.error(f"Invalid stop_times.{column} value: {v!r}")
            raise

    return values.map(convert).astype("Int64")


def prepare_table(name: str, df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of a GTFS table with the columns and types the store queries expect."""
    df = df.copy()
    df.columns = [str(c) for c in df.columns]

    for col in TABLE_COLUMNS.get(name, []):
        if col not in df.columns:
            df[col] = None

    for col in TEXT_COLUMNS.get(name, []):
        df[col] = df[col].map(_to_text).astype(object)

    for col, default in INT_COLUMNS.get(name, {}).items():
        series = pd.to_numeric(df[col], errors="coerce")
        if default is not None:
            series = series.fillna(default)
        df[col] = series.astype("Int64")

    if name == "stop_times":
        df["arrival_time_seconds"] = _seconds_column(df["arrival_time"], "arrival_time")
        df["departure_time_seconds"] = _seconds_column(df["departure_time"], "departure_time")

    return df


def build_sqlite_from_dict(tables: Dict[str, pd.DataFrame], db_tmp_path: str) -> None:
    """Build the schedule SQLite DB from a dict of DataFrames and write it to db_tmp_path.

    Tables missing from ``tables`` are created empty so every store query has
    its columns. The caller should atomically replace the final DB file.
    """
    conn = sqlite3.connect(db_tmp_path)
    try:
        cur = conn.cursor()
        try:
            cur.execute("PRAGMA journal_mode=DELETE;")
            cur.execute("PRAGMA synchronous=NORMAL;")
            cur.execute("PRAGMA temp_store=MEMORY;")
        except sqlite3.Error as e:
            logger.warning(f"Could not set all pragmas: {e}")

        for name, columns in TABLE_COLUMNS.items():
            df = tables.get(name)
            if df is None:
                logger.info(f"Table {name} not in source data, creating it empty")
                df = pd.DataFrame(columns=columns)
            df = prepare_table(name, df)
            logger.info(f"Creating table {name} with {len(df)} rows")
            df.to_sql(name, conn, if_exists="replace", index=False)

        logger.info("Creating indexes...")
        for index_name, table_name, columns in INDEXES:
            try:
                cur.execute(f"CREATE INDEX IF NOT EXISTS {index_name} ON {table_name}({columns});")
                logger.debug(f"Created index {index_name} on {table_name}({columns})")
            except sqlite3.Error as e:
                logger.warning(f"Could not create index {index_name}: {e}")

        logger.info("Analyzing tables for query optimization...")
        cur.execute("ANALYZE;")
        conn.commit()
    finally:
        conn.close()
    logger.info("Database build complete")


def build_sqlite_from_zip(zip_path: str, db_tmp_path: str):
    """Convenience: read GTFS ZIP via existing loader and build a SQLite DB tmp file."""
    from trip_resolver.core.load_gtfs import load_gtfs_from_zip

    tables = load_gtfs_from_zip(zip_path)
    build_sqlite_from_dict(tables, db_tmp_path)


def build_sqlite_from_directory(dir_path: str, db_tmp_path: str):
    """Convenience: read GTFS directory via existing loader and build a SQLite DB tmp file."""
    from trip_resolver.core.load_gtfs import load_gtfs_from_directory

    tables = load_gtfs_from_directory(dir_path)
    build_sqlite_from_dict(tables, db_tmp_path)
