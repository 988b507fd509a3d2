import logging
import os
from typing import Optional

from trip_resolver.config.settings import settings
from trip_resolver.core.gtfs_sqlite import GTFSStore
from trip_resolver.core.store import ScheduleStore

logger = logging.getLogger("trip_resolver.feed")


def _data_path(path: str) -> str:
    """Resolve `path` against GTFS_DATA_DIR unless it is already absolute."""
    if os.path.isabs(path):
        return path
    return os.path.join(settings.GTFS_DATA_DIR or "data/gtfs", path)


def feed_sources():
    """Return (directory, zip) candidate locations of the GTFS feed."""
    return _data_path("gtfs"), _data_path(settings.GTFS_PATH)


def load_if_present(rebuild: Optional[bool] = None) -> bool:
    """Construye la BD SQLite de horarios desde el feed GTFS si existe.

    Prioridad: directorio `<GTFS_DATA_DIR>/gtfs` -> ZIP `GTFS_PATH`.
    La BD se escribe en un fichero temporal y se sustituye de forma atómica.
    Si la BD ya existe y no se pide reconstruir, no hace nada.
    Devuelve True si hay BD disponible al terminar, False si no.
    """
    from trip_resolver.core.gtfs_sqlite_loader import build_sqlite_from_directory, build_sqlite_from_zip

    if rebuild is None:
        rebuild = settings.GTFS_REBUILD_ON_START

    db_final = settings.GTFS_DB_PATH
    if os.path.exists(db_final) and not rebuild:
        logger.info(f"Schedule DB already present at {db_final}, skipping build")
        return True

    gtfs_dir, zip_path = feed_sources()
    if os.path.isdir(gtfs_dir):
        source, build = gtfs_dir, build_sqlite_from_directory
    elif os.path.exists(zip_path):
        source, build = zip_path, build_sqlite_from_zip
    else:
        logger.warning(f"GTFS not found at {gtfs_dir} or {zip_path}; no data loaded")
        return os.path.exists(db_final)

    os.makedirs(os.path.dirname(db_final) or ".", exist_ok=True)
    db_tmp = db_final + ".tmp"
    try:
        build(source, db_tmp)
    except Exception:
        logger.exception(f"Failed to build schedule DB from {source}")
        if os.path.exists(db_tmp):
            os.remove(db_tmp)
        raise
    os.replace(db_tmp, db_final)
    logger.info(f"GTFS loaded from {source} into SQLite DB {db_final}")
    return True


def get_store() -> ScheduleStore:
    """Dependencia FastAPI: store de horarios sobre la BD configurada."""
    return GTFSStore(settings.GTFS_DB_PATH)
