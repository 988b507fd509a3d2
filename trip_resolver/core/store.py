from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence


class ScheduleStore(ABC):
    """Read-only access to the static schedule rows used by the resolvers.

    Rows are plain dicts keyed by GTFS column names. Dates are ``yyyymmdd``
    integers and times are seconds since midnight. Implementations raise
    ``StoreError`` on failure and never return partial results.
    """

    @abstractmethod
    def fetch_weekday_services(self, date: int, dow: str) -> List[Dict]:
        """calendar rows whose ``dow`` flag is 1 and whose window contains ``date``."""

    @abstractmethod
    def fetch_exceptions_on_date(self, date: int) -> List[Dict]:
        """calendar_dates rows (service_id, date, exception_type) for one date."""

    @abstractmethod
    def fetch_service_pattern(self, service_id: str) -> Optional[Dict]:
        """The calendar row of one service, or None."""

    @abstractmethod
    def fetch_service_exceptions(self, service_id: str) -> List[Dict]:
        """calendar_dates rows of one service ordered by date ascending."""

    @abstractmethod
    def fetch_candidate_trips_by_origin_departure(
        self, origin_id: str, destination_id: str, departure_seconds: int, service_ids: Sequence[str]
    ) -> List[str]:
        """Trip ids running under ``service_ids`` that visit ``destination_id`` and
        leave ``origin_id`` at exactly ``departure_seconds``, in feed order."""

    @abstractmethod
    def fetch_stop_time(self, trip_id: str, stop_id: str) -> Optional[Dict]:
        """The stop_times row (joined with its stop) of a trip at a stop, or None."""

    @abstractmethod
    def fetch_stop_times(self, trip_id: str) -> List[Dict]:
        """All stop_times rows (joined with stops) of a trip."""

    @abstractmethod
    def fetch_trip_detail(self, trip_id: str) -> Optional[Dict]:
        """``{"trip", "route", "agency", "stop_times"}`` for one trip, or None."""

    @abstractmethod
    def fetch_trip_ids_by_short_name(self, short_name: str, service_ids: Sequence[str]) -> List[str]:
        """Trip ids with ``trip_short_name`` running under ``service_ids``, in feed order."""
