"""
Generic response envelope.
Every list and lookup endpoint answers with {"data": ..., "meta": {...}?}.
"""
from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, SerializerFunctionWrapHandler, model_serializer

T = TypeVar("T")


class ResponseMeta(BaseModel):
    total_count: int
    result_count: int


class ResponseEnvelope(BaseModel, Generic[T]):
    """
    Wraps a result set.
    ``meta`` is only serialized when count metadata was requested.
    """

    data: T
    meta: ResponseMeta | None = None

    @model_serializer(mode="wrap")
    def _omit_missing_meta(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        payload = handler(self)
        if self.meta is None:
            payload.pop("meta", None)
        return payload
