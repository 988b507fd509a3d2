# trip_resolver/domain/models.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum

from trip_resolver.utils.time_utils import DateTime, day_of_week, parse_time


@dataclass(frozen=True)
class Agency:
    agency_id: str | None
    name: str | None = None
    url: str | None = None
    timezone: str | None = None


@dataclass(frozen=True)
class Route:
    route_id: str
    short_name: str | None = None
    long_name: str | None = None
    route_type: int | None = None
    agency: Agency | None = None
    color: str | None = None
    text_color: str | None = None


@dataclass(frozen=True)
class Stop:
    stop_id: str
    name: str | None = None
    lat: float | None = None
    lon: float | None = None
    url: str | None = None
    wheelchair_boarding: int = 0
    parent_station: str | None = None


class ExceptionType(IntEnum):
    ADDED = 1
    REMOVED = 2


@dataclass(frozen=True)
class ServiceException:
    service_id: str
    date: int
    exception_type: ExceptionType

    @property
    def is_added(self) -> bool:
        return self.exception_type == ExceptionType.ADDED

    @property
    def is_removed(self) -> bool:
        return self.exception_type == ExceptionType.REMOVED


SERVICE_AVAILABLE = 1
SERVICE_UNAVAILABLE = 0


@dataclass(frozen=True)
class Service:
    service_id: str
    monday: int = SERVICE_UNAVAILABLE
    tuesday: int = SERVICE_UNAVAILABLE
    wednesday: int = SERVICE_UNAVAILABLE
    thursday: int = SERVICE_UNAVAILABLE
    friday: int = SERVICE_UNAVAILABLE
    saturday: int = SERVICE_UNAVAILABLE
    sunday: int = SERVICE_UNAVAILABLE
    start_date: int = 0
    end_date: int = 0
    exceptions: tuple[ServiceException, ...] = ()

    def is_available(self, dow: str) -> bool:
        """True when the weekday flag for ``dow`` (``"monday"`` .. ``"sunday"``) is set."""
        return getattr(self, dow.lower()) == SERVICE_AVAILABLE

    def exception_on(self, date: int) -> ServiceException | None:
        for se in self.exceptions:
            if se.date == date:
                return se
        return None

    def is_active_on(self, date: int) -> bool:
        """Evaluate the weekday pattern and the exception overlay for one date."""
        se = self.exception_on(date)
        if se is not None:
            return se.is_added
        return self.start_date <= date <= self.end_date and self.is_available(day_of_week(date))


class PickupType(IntEnum):
    REGULAR = 0
    NONE = 1
    PHONE_AGENCY = 2
    DRIVER_COORDINATION = 3


# drop_off_type uses the same codes
DropOffType = PickupType


@dataclass(frozen=True)
class StopTime:
    stop: Stop
    arrival_time: str | None
    departure_time: str | None
    stop_sequence: int
    arrival_time_seconds: int | None = None
    departure_time_seconds: int | None = None
    pickup_type: int = PickupType.REGULAR
    drop_off_type: int = DropOffType.REGULAR
    date: int | None = None

    def __post_init__(self):
        # seconds are derived from the GTFS strings when the store did not supply them
        if self.arrival_time_seconds is None and self.arrival_time:
            object.__setattr__(self, "arrival_time_seconds", parse_time(self.arrival_time))
        if self.departure_time_seconds is None and self.departure_time:
            object.__setattr__(self, "departure_time_seconds", parse_time(self.departure_time))

    @property
    def stop_id(self) -> str:
        return self.stop.stop_id

    @property
    def arrival(self) -> DateTime | None:
        if self.arrival_time_seconds is None:
            return None
        return DateTime(self.arrival_time_seconds, self.date)

    @property
    def departure(self) -> DateTime | None:
        if self.departure_time_seconds is None:
            return None
        return DateTime(self.departure_time_seconds, self.date)


def sort_stop_times(stop_times: Iterable[StopTime]) -> list[StopTime]:
    """Order stop times by stop sequence. ``sorted`` is stable, equal sequences keep input order."""
    return sorted(stop_times, key=lambda st: st.stop_sequence)


def _stop_key(stop: Stop | str) -> str:
    return stop.stop_id if isinstance(stop, Stop) else stop


class WheelchairAccessible(IntEnum):
    UNKNOWN = 0
    YES = 1
    NO = 2


class BikesAllowed(IntEnum):
    UNKNOWN = 0
    YES = 1
    NO = 2


@dataclass(frozen=True)
class Trip:
    trip_id: str
    route: Route
    service: Service | None
    stop_times: tuple[StopTime, ...] = ()
    short_name: str | None = None
    headsign: str | None = None
    direction_id: int | None = None
    block_id: str | None = None
    shape_id: str | None = None
    wheelchair_accessible: int = WheelchairAccessible.UNKNOWN
    bikes_allowed: int = BikesAllowed.UNKNOWN

    def __post_init__(self):
        object.__setattr__(self, "stop_times", tuple(sort_stop_times(self.stop_times)))
        if not self.short_name:
            object.__setattr__(self, "short_name", self.trip_id)

    def get_stop_time(self, stop: Stop | str) -> StopTime | None:
        key = _stop_key(stop)
        for st in self.stop_times:
            if st.stop.stop_id == key:
                return st
        return None

    def has_stop_time(self, stop: Stop | str) -> bool:
        return self.get_stop_time(stop) is not None

    @property
    def origin(self) -> StopTime | None:
        return self.stop_times[0] if self.stop_times else None

    @property
    def destination(self) -> StopTime | None:
        return self.stop_times[-1] if self.stop_times else None
