from fastapi import APIRouter, Depends, HTTPException
from typing import Optional

from trip_resolver.core.store import ScheduleStore
from trip_resolver.schemas.response import Envelope
from trip_resolver.schemas.trip import TripOut, serialize_trip
from trip_resolver.services import trip_service
from trip_resolver.services.gtfs_service import get_store
from trip_resolver.utils.response import success_response
from trip_resolver.utils.time_utils import DateTime

router = APIRouter(prefix="/trips", tags=["Trips"])


# literal paths are declared before /{trip_id} so they are not captured by it
@router.get(
	"/departure",
	summary="Viaje por salida programada",
	response_model=Envelope[TripOut],
	description=(
		"Busca el viaje que sale de `origin` hacia `destination` exactamente a la hora `time` "
		"del día `date`. Si no hay coincidencia ese día, se busca en el día de servicio anterior "
		"con la hora desplazada 24h (viajes de madrugada publicados como `25:30:00`).\n\n"
		"Parámetros:\n"
		"- `origin` (string): `stop_id` de origen.\n"
		"- `destination` (string): `stop_id` de destino, posterior al origen en el viaje.\n"
		"- `time` (string): hora de salida (`HH:MM[:SS]`, `HHMM` o `h:mm AM/PM`).\n"
		"- `date` (string): fecha en formato `YYYYMMDD` o `YYYY-MM-DD`.\n\n"
		"Ejemplo:\n``GET /trips/departure?origin=A&destination=B&time=08:00&date=20240304``"
	),
	responses={400: {"description": "Invalid argument"}, 404: {"description": "Trip not found"}},
)
def find_trip_by_departure(
	origin: str, destination: str, time: str, date: str, store: ScheduleStore = Depends(get_store)
):
	departure = DateTime.create(time, date)
	trip = trip_service.get_trip_by_departure(store, origin, destination, departure)
	if trip is None:
		raise HTTPException(status_code=404, detail="Trip not found")
	return success_response(serialize_trip(trip))


@router.get(
	"/short-name/{short_name}",
	summary="Viaje por nombre corto",
	response_model=Envelope[TripOut],
	description=(
		"Devuelve el primer viaje con `trip_short_name` igual al indicado entre los servicios "
		"que operan en la fecha `date`."
	),
	responses={404: {"description": "Trip not found"}},
)
def read_trip_by_short_name(short_name: str, date: str, store: ScheduleStore = Depends(get_store)):
	trip = trip_service.get_trip_by_short_name(store, short_name, date)
	if trip is None:
		raise HTTPException(status_code=404, detail="Trip not found")
	return success_response(serialize_trip(trip))


@router.get(
	"/{trip_id}",
	summary="Obtener viaje por ID",
	response_model=Envelope[TripOut],
	description=(
		"Devuelve el viaje con su ruta, agencia, servicio y paradas ordenadas por `stop_sequence`. "
		"Con `date` las horas se devuelven también como instantes ISO de ese día."
	),
	responses={404: {"description": "Trip not found"}},
)
def read_trip(trip_id: str, date: Optional[str] = None, store: ScheduleStore = Depends(get_store)):
	trip = trip_service.get_trip(store, trip_id, date)
	if trip is None:
		raise HTTPException(status_code=404, detail="Trip not found")
	return success_response(serialize_trip(trip))
