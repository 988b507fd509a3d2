import logging
import logging.handlers
from typing import List, Optional

from trip_resolver.config.settings import settings

LOGGER_NAME = "trip_resolver"


def _build_handlers(level: int) -> List[logging.Handler]:
    formatter = logging.Formatter(settings.LOG_FORMAT)
    handlers: List[logging.Handler] = []

    if settings.LOG_TO_CONSOLE:
        handlers.append(logging.StreamHandler())

    if settings.LOG_FILE:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                settings.LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
            )
        )

    for h in handlers:
        h.setLevel(level)
        h.setFormatter(formatter)
    return handlers


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Configura el logging de la aplicación según `settings`.

    - `LOG_LEVEL`: nivel de logging (o `level` si se pasa)
    - `LOG_TO_CONSOLE`: activar handler de consola
    - `LOG_FILE`: si se proporciona, habilita RotatingFileHandler
    - `LOG_FORMAT`: formato de mensajes

    Devuelve el logger `trip_resolver`, padre de todos los loggers del paquete.
    """
    lvl = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)
    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel(lvl)

    root = logging.getLogger()
    # handlers already installed (second call, or pytest's capture handler)
    if root.handlers:
        return app_logger

    root.setLevel(lvl)
    for h in _build_handlers(lvl):
        root.addHandler(h)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    return app_logger
