from pydantic import BaseModel
from typing import List

from trip_resolver.domain.models import Service, ServiceException


class ServiceExceptionOut(BaseModel):
    service_id: str
    date: int
    exception_type: int


class ServiceOut(BaseModel):
    service_id: str
    monday: int
    tuesday: int
    wednesday: int
    thursday: int
    friday: int
    saturday: int
    sunday: int
    start_date: int
    end_date: int
    exceptions: List[ServiceExceptionOut] = []


def serialize_exception(se: ServiceException) -> dict:
    return {"service_id": se.service_id, "date": se.date, "exception_type": int(se.exception_type)}


def serialize_service(service: Service) -> dict:
    return {
        "service_id": service.service_id,
        "monday": service.monday,
        "tuesday": service.tuesday,
        "wednesday": service.wednesday,
        "thursday": service.thursday,
        "friday": service.friday,
        "saturday": service.saturday,
        "sunday": service.sunday,
        "start_date": service.start_date,
        "end_date": service.end_date,
        "exceptions": [serialize_exception(se) for se in service.exceptions],
    }
