import os
import sqlite3
import zipfile

import pandas as pd
import pytest

from trip_resolver.core.errors import ParseError, StoreError
from trip_resolver.core.gtfs_sqlite import GTFSStore
from trip_resolver.core.gtfs_sqlite_loader import build_sqlite_from_dict, build_sqlite_from_directory, build_sqlite_from_zip
from trip_resolver.core.load_gtfs import load_gtfs_from_directory

from conftest import MONDAY, TUESDAY, feed_tables


def test_loader_adds_seconds_columns(db_path):
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute(
            "SELECT departure_time, departure_time_seconds, arrival_time_seconds FROM stop_times WHERE trip_id = 'T4' ORDER BY stop_sequence"
        ).fetchall()
    finally:
        conn.close()
    assert rows == [("25:30:00", 91800, 91800), ("26:00:00", 93600, 93600)]


def test_loader_creates_missing_tables_empty(tmp_path):
    tables = feed_tables()
    del tables["calendar_dates"]
    db = os.path.join(str(tmp_path), "partial.db")
    build_sqlite_from_dict(tables, db)
    store = GTFSStore(db)
    assert store.fetch_exceptions_on_date(MONDAY) == []
    assert [r["service_id"] for r in store.fetch_weekday_services(MONDAY, "monday")] == ["S1", "S3"]


def test_loader_rejects_malformed_time(tmp_path):
    tables = feed_tables()
    tables["stop_times"].loc[0, "departure_time"] = "8h30"
    with pytest.raises(ParseError):
        build_sqlite_from_dict(tables, os.path.join(str(tmp_path), "bad.db"))


def test_loader_keeps_empty_times_null(tmp_path):
    tables = feed_tables()
    tables["stop_times"].loc[0, ["arrival_time", "departure_time"]] = None
    db = os.path.join(str(tmp_path), "gaps.db")
    build_sqlite_from_dict(tables, db)
    row = GTFSStore(db).fetch_stop_time("T1", "B")
    assert row["departure_time_seconds"] is None


def test_build_from_zip_and_directory(tmp_path):
    feed_dir = tmp_path / "feed"
    feed_dir.mkdir()
    for name, df in feed_tables().items():
        df.to_csv(feed_dir / f"{name}.txt", index=False)

    tables = load_gtfs_from_directory(str(feed_dir))
    # ids keep their string type
    assert tables["trips"]["trip_short_name"].tolist()[0] == "1001"

    zip_path = tmp_path / "gtfs.zip"
    with zipfile.ZipFile(zip_path, "w") as z:
        for f in feed_dir.iterdir():
            z.write(f, arcname=f.name)
    db = str(tmp_path / "zip.db")
    build_sqlite_from_zip(str(zip_path), db)
    assert GTFSStore(db).fetch_candidate_trips_by_origin_departure("A", "B", 28800, ["S3"]) == ["T1"]


def test_weekday_services_respect_window_and_flag(store):
    assert [r["service_id"] for r in store.fetch_weekday_services(MONDAY, "monday")] == ["S1", "S3"]
    assert [r["service_id"] for r in store.fetch_weekday_services(20240309, "saturday")] == ["S2"]
    assert store.fetch_weekday_services(20250106, "monday") == []


def test_weekday_services_rejects_unknown_day(store):
    with pytest.raises(ValueError):
        store.fetch_weekday_services(MONDAY, "funday")


def test_exceptions_in_feed_order(store):
    rows = store.fetch_exceptions_on_date(MONDAY)
    assert [(r["service_id"], r["exception_type"]) for r in rows] == [("S1", 2), ("S2", 1), ("S2", 1)]


def test_candidates_in_feed_order(store):
    assert store.fetch_candidate_trips_by_origin_departure("A", "B", 43200, ["S1"]) == ["T5", "T6"]


def test_candidates_empty_service_set(store):
    assert store.fetch_candidate_trips_by_origin_departure("A", "B", 43200, []) == []


def test_candidates_require_destination_visit(store):
    # T7 leaves A at 07:00 but never reaches B
    assert store.fetch_candidate_trips_by_origin_departure("A", "B", 25200, ["S2"]) == []
    assert store.fetch_candidate_trips_by_origin_departure("A", "C", 25200, ["S2"]) == ["T7"]


def test_stop_time_lookup(store):
    row = store.fetch_stop_time("T1", "B")
    assert row["stop_sequence"] == 2
    assert row["stop_name"] == "Bravo"
    assert store.fetch_stop_time("T1", "Z") is None


def test_trip_detail(store):
    detail = store.fetch_trip_detail("T1")
    assert detail["trip"]["trip_short_name"] == "1001"
    assert detail["route"]["route_short_name"] == "C1"
    assert detail["agency"]["agency_name"] == "Test Rail"
    assert len(detail["stop_times"]) == 3
    assert store.fetch_trip_detail("NOPE") is None


def test_short_name_restricted_to_services(store):
    assert store.fetch_trip_ids_by_short_name("SAT1", ["S2"]) == ["T7"]
    assert store.fetch_trip_ids_by_short_name("SAT1", ["S1", "S3"]) == []


def test_missing_db_raises_store_error(tmp_path):
    store = GTFSStore(os.path.join(str(tmp_path), "missing.db"))
    with pytest.raises(StoreError):
        store.fetch_exceptions_on_date(TUESDAY)
    # read-only store does not create the file
    assert not os.path.exists(os.path.join(str(tmp_path), "missing.db"))


def test_dtype_of_dates_is_integer(db_path):
    conn = sqlite3.connect(db_path)
    try:
        df = pd.read_sql("SELECT start_date, end_date FROM calendar", conn)
    finally:
        conn.close()
    assert df["start_date"].tolist() == [20240101] * 3


def test_blank_times_from_feed_directory(tmp_path):
    tables = feed_tables()
    # non-timepoint stop: both times left blank in the CSV
    tables["stop_times"].loc[0, ["arrival_time", "departure_time"]] = ""
    feed_dir = tmp_path / "feed"
    feed_dir.mkdir()
    for name, df in tables.items():
        df.to_csv(feed_dir / f"{name}.txt", index=False)

    db = str(tmp_path / "blank.db")
    build_sqlite_from_directory(str(feed_dir), db)
    row = GTFSStore(db).fetch_stop_time("T1", "B")
    assert row["arrival_time_seconds"] is None
    assert row["departure_time_seconds"] is None
    assert GTFSStore(db).fetch_stop_time("T1", "A")["departure_time_seconds"] == 28800
