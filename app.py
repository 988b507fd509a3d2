from fastapi import FastAPI, Request, Depends
from fastapi.responses import JSONResponse
from fastapi.exceptions import HTTPException as FastAPIHTTPException
from trip_resolver.utils.response import error_response
from trip_resolver.routers import calendar, trips
from trip_resolver.services import gtfs_service
from trip_resolver.core.errors import InvalidArgument, ParseError, StoreError
from trip_resolver.core.security import api_key_required
from trip_resolver.core.logging_config import setup_logging
from trip_resolver.config.settings import settings
import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator


# inicializar logging lo antes posible
setup_logging()
logger = logging.getLogger("trip_resolver.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan handler: construye la BD de horarios antes de servir."""
    os.makedirs(settings.GTFS_DATA_DIR, exist_ok=True)
    # en un thread para no bloquear el event loop
    ready = await asyncio.to_thread(gtfs_service.load_if_present)
    if not ready:
        logger.warning("Starting without a schedule DB; queries will fail with 503 until one is built")
    yield


app = FastAPI(
    title="Trip Resolver API",
    description="Resolución de servicios por fecha y búsqueda de viajes por salida programada sobre un feed GTFS",
    version="1.0.0",
    lifespan=lifespan,
)

# aplicar dependencia de API key a todos los routers al registrarlos
app.include_router(calendar.router, dependencies=[Depends(api_key_required)])
app.include_router(trips.router, dependencies=[Depends(api_key_required)])


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Registra method, path, status_code y elapsed_ms de cada petición."""
    start = time.time()
    response = await call_next(request)
    elapsed = (time.time() - start) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.1f}ms)")
    return response


def _problem(status: int, title: str, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status, content=error_response(title=title, status=status, detail=detail))


@app.exception_handler(FastAPIHTTPException)
async def http_exception_handler(request: Request, exc: FastAPIHTTPException):
    logger.info(f"{request.method} {request.url.path}: {exc.status_code} {exc.detail}")
    return _problem(exc.status_code, str(exc.detail), str(exc.detail))


@app.exception_handler(ParseError)
@app.exception_handler(InvalidArgument)
async def bad_request_handler(request: Request, exc: Exception):
    logger.warning(f"{request.method} {request.url.path}: bad request: {exc}")
    return _problem(400, "Bad Request", str(exc))


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"{request.method} {request.url.path}: schedule store unavailable: {exc}")
    return _problem(503, "Schedule Store Unavailable", str(exc))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _problem(500, "Internal Server Error", str(exc))
