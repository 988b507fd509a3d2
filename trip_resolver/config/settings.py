import os
from typing import Optional


def _bool_env(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).lower() in ("1", "true", "yes", "on")


class Settings:
    """Simple settings loader that reads from environment with sensible defaults.

    This avoids a hard dependency on pydantic-settings while keeping behavior
    predictable for tests and runtime.
    """

    def __init__(self) -> None:
        # Directory where the GTFS feed and the schedule DB are stored
        self.GTFS_DATA_DIR: str = os.getenv("GTFS_DATA_DIR", "data/gtfs")
        # GTFS feed zip (relative to GTFS_DATA_DIR if not absolute)
        self.GTFS_PATH: str = os.getenv("GTFS_PATH", "gtfs.zip")
        # Schedule SQLite DB built from the feed
        self.GTFS_DB_PATH: str = os.getenv("GTFS_DB_PATH", os.path.join(self.GTFS_DATA_DIR, "gtfs.db"))
        # Rebuild the DB at startup even if it already exists
        self.GTFS_REBUILD_ON_START: bool = _bool_env("GTFS_REBUILD_ON_START", False)
        self.API_KEY: Optional[str] = os.getenv("API_KEY")

        # Logging
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_TO_CONSOLE: bool = _bool_env("LOG_TO_CONSOLE", True)
        self.LOG_FILE: Optional[str] = os.getenv("LOG_FILE")
        self.LOG_FORMAT: str = os.getenv("LOG_FORMAT", "%(asctime)s | %(levelname)s | %(name)s | %(message)s")


settings = Settings()
