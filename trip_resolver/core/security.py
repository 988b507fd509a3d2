import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from trip_resolver.config.settings import settings


def api_key_required(x_api_key: Optional[str] = Header(None, alias="X-API-Key")) -> bool:
    """Dependencia que exige el header `X-API-Key` cuando `API_KEY` está configurada.

    Sin `API_KEY` (modo desarrollo) todas las peticiones pasan.
    """
    expected = settings.API_KEY
    if expected is None:
        return True
    if x_api_key is not None and secrets.compare_digest(x_api_key, expected):
        return True
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing API Key")
