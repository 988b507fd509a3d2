from fastapi import APIRouter, Depends, HTTPException
from typing import List

from trip_resolver.core.store import ScheduleStore
from trip_resolver.schemas.response import Envelope
from trip_resolver.schemas.service import ServiceOut, serialize_service
from trip_resolver.services import calendar_service
from trip_resolver.services.gtfs_service import get_store
from trip_resolver.utils.response import success_response
from trip_resolver.utils.time_utils import parse_date

router = APIRouter(prefix="/services", tags=["Services"])


@router.get(
	"/",
	summary="Servicios activos en una fecha",
	response_model=Envelope[List[ServiceOut]],
	description=(
		"Devuelve los servicios que operan en la fecha indicada: el patrón semanal de `calendar` "
		"con las excepciones de `calendar_dates` aplicadas (primero bajas, después altas).\n\n"
		"Parámetros:\n- `date` (string): fecha en formato `YYYYMMDD` o `YYYY-MM-DD`.\n\n"
		"Ejemplo:\n``GET /services/?date=20240304``"
	),
	responses={400: {"description": "Invalid date"}},
)
def list_effective_services(date: str, store: ScheduleStore = Depends(get_store)):
	d = parse_date(date)
	services = calendar_service.get_services_effective(store, d)
	return success_response([serialize_service(s) for s in services], meta={"date": d, "count": len(services)})


@router.get(
	"/{service_id}",
	summary="Obtener servicio por ID",
	response_model=Envelope[ServiceOut],
	description=(
		"Recupera el patrón semanal de un servicio junto con todo su historial de excepciones.\n\n"
		"Respuestas de error:\n- `404 Not Found`: el servicio no aparece ni en `calendar` ni en `calendar_dates`."
	),
	responses={404: {"description": "Service not found"}},
)
def read_service(service_id: str, store: ScheduleStore = Depends(get_store)):
	service = calendar_service.get_service(store, service_id)
	if service is None:
		raise HTTPException(status_code=404, detail="Service not found")
	return success_response(serialize_service(service))
