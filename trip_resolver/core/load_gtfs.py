import io
import logging
import os
import re
import unicodedata
import zipfile
from typing import Dict

import pandas as pd
from pandas.api import types as pdtypes

logger = logging.getLogger("trip_resolver.loader")

# IDs often have leading zeros and dates must not be read as floats
DTYPE_SPECS = {
    "agency.txt": {"agency_id": str},
    "stops.txt": {"stop_id": str, "parent_station": str},
    "routes.txt": {"route_id": str, "agency_id": str},
    "trips.txt": {"route_id": str, "service_id": str, "trip_id": str, "shape_id": str, "block_id": str, "trip_short_name": str},
    "stop_times.txt": {"trip_id": str, "stop_id": str, "arrival_time": str, "departure_time": str},
    "calendar.txt": {"service_id": str, "start_date": str, "end_date": str},
    "calendar_dates.txt": {"service_id": str, "date": str},
}

GTFS_FILES = list(DTYPE_SPECS.keys())


def _clean_text(value: str) -> str:
    """Normalize and clean a single text value.

    - Normalize unicode (NFKC)
    - Remove BOM and zero-width / weird spaces
    - Remove C0/C1 control characters
    - Collapse multiple whitespace into single space and strip
    """
    if not isinstance(value, str):
        value = str(value)

    value = unicodedata.normalize("NFKC", value)

    value = value.replace("\ufeff", "")
    value = value.replace("\u200b", "")
    value = value.replace("\u00a0", " ")

    value = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]", "", value)
    value = re.sub(r"\s+", " ", value)

    return value.strip()


def _clean_column_name(name) -> str:
    name = unicodedata.normalize("NFKC", str(name))
    name = name.replace("\ufeff", "")
    return name.strip()


def _clean_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    """Clean all text columns and column names of a dataframe in-place (returns df).

    Only object/string dtype columns are touched to avoid changing numeric types.
    """
    df.columns = [_clean_column_name(c) for c in df.columns]

    for col in df.columns:
        if pdtypes.is_object_dtype(df[col]) or pdtypes.is_string_dtype(df[col]):
            # keep NaN as-is
            df[col] = df[col].apply(lambda v: _clean_text(v) if pd.notna(v) else v)
    return df


def _read_csv(source, name: str) -> pd.DataFrame:
    return pd.read_csv(source, low_memory=False, dtype=DTYPE_SPECS.get(name))


def load_gtfs_from_directory(dir_path: str) -> Dict[str, pd.DataFrame]:
    """Carga los ficheros GTFS que usa el resolvedor desde un directorio descomprimido.

    Ficheros: agency, stops, routes, trips, stop_times, calendar, calendar_dates.
    Se limpian los textos de cada fichero para eliminar espacios raros y caracteres de control.
    """
    dfs = {}
    for name in GTFS_FILES:
        file_path = os.path.join(dir_path, name)
        if not os.path.exists(file_path):
            continue
        try:
            df = _read_csv(file_path, name)
        except UnicodeDecodeError:
            # some feeds ship latin-1 files
            df = pd.read_csv(file_path, encoding="latin-1", low_memory=False, dtype=DTYPE_SPECS.get(name))
        dfs[name.replace(".txt", "")] = _clean_dataframe(df)
        logger.debug(f"Read {name}: {len(df)} rows")
    return dfs


def load_gtfs_from_zip(zip_path: str) -> Dict[str, pd.DataFrame]:
    """Carga los ficheros GTFS que usa el resolvedor desde un ZIP y devuelve dataframes."""
    dfs = {}
    with zipfile.ZipFile(zip_path, "r") as z:
        names = z.namelist()
        for name in GTFS_FILES:
            if name not in names:
                continue
            raw = z.read(name)
            try:
                df = _read_csv(io.StringIO(raw.decode("utf-8-sig")), name)
            except UnicodeDecodeError:
                df = _read_csv(io.StringIO(raw.decode("latin-1")), name)
            dfs[name.replace(".txt", "")] = _clean_dataframe(df)
            logger.debug(f"Read {name} from {zip_path}: {len(df)} rows")
    return dfs
