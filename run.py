"""Simple runner for the trip resolver API.

Usage:
  python run.py

Optional environment variables:
  HOST (default localhost)
  PORT (default 8000)
  UVICORN_RELOAD (true/false)

The schedule DB is built from the GTFS feed on startup (see `GTFS_DATA_DIR`).
"""
import os

import uvicorn


def main():
    host = os.getenv("HOST", "localhost")
    port = int(os.getenv("PORT", "8000"))
    reload_flag = os.getenv("UVICORN_RELOAD", "false").lower() in ("1", "true", "yes", "on")

    # module string so reload works
    uvicorn.run("app:app", host=host, port=port, reload=reload_flag)


if __name__ == "__main__":
    main()
