from trip_resolver.domain.models import (
    ExceptionType,
    Route,
    Service,
    ServiceException,
    Stop,
    StopTime,
    Trip,
)
from trip_resolver.utils.time_utils import DateTime


def _st(stop_id, seq, t="08:00:00", date=None):
    return StopTime(stop=Stop(stop_id), arrival_time=t, departure_time=t, stop_sequence=seq, date=date)


def test_trip_sorts_stop_times_by_sequence():
    trip = Trip("T1", Route("R1"), None, stop_times=[_st("C", 3), _st("A", 1), _st("B", 2)])
    assert [st.stop_sequence for st in trip.stop_times] == [1, 2, 3]
    assert isinstance(trip.stop_times, tuple)
    assert trip.origin.stop_id == "A"
    assert trip.destination.stop_id == "C"


def test_trip_sort_is_stable_for_equal_sequences():
    trip = Trip("T1", Route("R1"), None, stop_times=[_st("X", 1), _st("Y", 1)])
    assert [st.stop_id for st in trip.stop_times] == ["X", "Y"]


def test_trip_short_name_defaults_to_id():
    assert Trip("T9", Route("R1"), None).short_name == "T9"
    assert Trip("T9", Route("R1"), None, short_name="900").short_name == "900"


def test_trip_stop_time_lookup():
    trip = Trip("T1", Route("R1"), None, stop_times=[_st("A", 1), _st("B", 2)])
    assert trip.get_stop_time("B").stop_sequence == 2
    assert trip.get_stop_time(Stop("A")).stop_sequence == 1
    assert trip.get_stop_time("Z") is None
    assert trip.has_stop_time("A")
    assert not trip.has_stop_time("Z")
    assert Trip("T2", Route("R1"), None).origin is None


def test_stop_time_derives_seconds_and_instants():
    st = _st("A", 1, "25:30:00", date=20240304)
    assert st.departure_time_seconds == 91800
    assert st.departure == DateTime(91800, 20240304)
    assert st.departure.to_datetime().day == 5


def test_stop_time_without_times():
    st = StopTime(stop=Stop("A"), arrival_time=None, departure_time=None, stop_sequence=1)
    assert st.arrival is None
    assert st.departure is None


def test_service_active_on_date():
    weekdays = dict(monday=1, tuesday=1, wednesday=1, thursday=1, friday=1)
    service = Service(
        "S1",
        **weekdays,
        start_date=20240101,
        end_date=20241231,
        exceptions=(
            ServiceException("S1", 20240304, ExceptionType.REMOVED),
            ServiceException("S1", 20240309, ExceptionType.ADDED),
        ),
    )
    assert service.is_available("Monday")
    assert not service.is_available("sunday")
    assert service.is_active_on(20240305)
    assert not service.is_active_on(20240304)
    # saturday added by exception
    assert service.is_active_on(20240309)
    assert not service.is_active_on(20240310)
    # outside the validity window
    assert not service.is_active_on(20250106)
