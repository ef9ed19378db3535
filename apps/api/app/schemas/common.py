"""Response envelopes shared by the resource routers."""

from typing import Generic, TypeVar

from pydantic import BaseModel

from app.utils.pagination import Pagination

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    data: T


class ListResponse(BaseModel, Generic[T]):
    data: list[T]
    pagination: Pagination


class MessageResponse(BaseModel):
    message: str
