from pydantic import BaseModel
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    status: str
    data: Optional[T] = None
    meta: Optional[dict] = None
