"""Calendar resolution: which services operate on a date.

The default set comes from ``calendar`` (weekday flag + validity window) and
is overlaid with the ``calendar_dates`` exceptions of that exact date:
REMOVED drops a default service, ADDED appends a service that is not already
in the set. The result keeps the default-set order followed by added
services in the order their exceptions were returned.
"""
import logging
from typing import Dict, List, Optional, Sequence, Union

from trip_resolver.core.store import ScheduleStore
from trip_resolver.domain.models import ExceptionType, Service, ServiceException
from trip_resolver.utils.time_utils import DateInput, day_of_week, parse_date

logger = logging.getLogger("trip_resolver.calendar")


def _service_from_row(row: Dict, exceptions: Sequence[ServiceException] = ()) -> Service:
    return Service(
        service_id=str(row["service_id"]),
        monday=int(row["monday"]),
        tuesday=int(row["tuesday"]),
        wednesday=int(row["wednesday"]),
        thursday=int(row["thursday"]),
        friday=int(row["friday"]),
        saturday=int(row["saturday"]),
        sunday=int(row["sunday"]),
        start_date=int(row["start_date"]),
        end_date=int(row["end_date"]),
        exceptions=tuple(exceptions),
    )


def _exception_from_row(row: Dict, service_id: Optional[str] = None) -> ServiceException:
    return ServiceException(
        service_id=str(service_id if service_id is not None else row["service_id"]),
        date=int(row["date"]),
        exception_type=ExceptionType(int(row["exception_type"])),
    )


def get_services_default(store: ScheduleStore, date: DateInput) -> List[Service]:
    """Services whose weekly pattern runs on ``date``, ignoring exceptions."""
    d = parse_date(date)
    rows = store.fetch_weekday_services(d, day_of_week(d))
    return [_service_from_row(r) for r in rows]


def get_service_exceptions(store: ScheduleStore, date: DateInput) -> List[ServiceException]:
    """Service exceptions (added or removed) in effect on ``date``."""
    d = parse_date(date)
    return [_exception_from_row(r) for r in store.fetch_exceptions_on_date(d)]


def _get_single_service(store: ScheduleStore, service_id: str) -> Optional[Service]:
    exceptions = [_exception_from_row(r, service_id) for r in store.fetch_service_exceptions(service_id)]
    row = store.fetch_service_pattern(service_id)
    if row is None:
        if not exceptions:
            return None
        # service only defined through calendar_dates
        return Service(service_id=service_id, exceptions=tuple(exceptions))
    return _service_from_row(row, exceptions)


def get_service(
    store: ScheduleStore, service_id: Union[str, Sequence[str]]
) -> Union[Optional[Service], List[Optional[Service]]]:
    """Assemble Service(s) with their full exception history.

    With a single id, returns the Service or None when the id has neither a
    calendar row nor calendar_dates rows. With a list of ids, returns a list
    in the same order where unknown ids hold None. A store failure for any
    id fails the whole call.
    """
    if isinstance(service_id, (list, tuple)):
        return [_get_single_service(store, str(sid)) for sid in service_id]
    return _get_single_service(store, str(service_id))


def get_services_effective(store: ScheduleStore, date: DateInput) -> List[Service]:
    """Services running on ``date`` once calendar_dates exceptions are applied."""
    d = parse_date(date)
    default_services = get_services_default(store, d)
    exceptions = get_service_exceptions(store, d)

    removed = {se.service_id for se in exceptions if se.is_removed}
    effective = [s for s in default_services if s.service_id not in removed]
    present = {s.service_id for s in effective}

    to_add: List[str] = []
    for se in exceptions:
        if se.is_added and se.service_id not in present:
            present.add(se.service_id)
            to_add.append(se.service_id)

    if to_add:
        for service in get_service(store, to_add):
            if service is not None:
                effective.append(service)

    logger.debug(
        f"Effective services on {d}: default={len(default_services)} removed={len(removed)} "
        f"added={len(to_add)} total={len(effective)}"
    )
    return effective


def get_service_ids_effective(store: ScheduleStore, date: DateInput) -> List[str]:
    return [s.service_id for s in get_services_effective(store, date)]


def is_service_active(service: Service, date: DateInput) -> bool:
    """Whether an already assembled Service runs on ``date``."""
    return service.is_active_on(parse_date(date))
