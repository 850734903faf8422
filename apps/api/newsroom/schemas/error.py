"""Response envelope schemas."""

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    success: Literal[True] = True
    message: str | None = None
    data: DataT | None = None


class ErrorDetail(BaseModel):
    code: str
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    message: str
    error: ErrorDetail
