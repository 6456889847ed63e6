"""Envelope shared by every successful response."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """``{message, data}`` success envelope."""

    message: str
    data: T
