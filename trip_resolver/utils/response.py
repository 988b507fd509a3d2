from typing import Any, Dict, Optional


def success_response(data: Any, meta: Optional[Dict] = None) -> Dict:
    """Envoltorio estándar de las respuestas correctas.

    {"status": "ok", "data": ..., "meta": {...}}  # meta opcional
    """
    payload = {"status": "ok", "data": data}
    if meta:
        payload["meta"] = meta
    return payload


def error_response(title: str, status: int, detail: Optional[str] = None, type_: str = "about:blank") -> Dict:
    """Cuerpo de error al estilo Problem Details (RFC 7807)."""
    return {"type": type_, "title": title, "status": status, "detail": detail}
