"""Pagination utilities for list endpoints."""

import math
from dataclasses import dataclass

from fastapi import Query
from pydantic import BaseModel
from sqlalchemy.orm import Query as SQLAlchemyQuery


# Pagination limits
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass
class PaginationParams:
    """Pagination parameters from query string."""
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_pagination(
    page: int = Query(DEFAULT_PAGE, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description=f"Items per page (max {MAX_LIMIT})"),
) -> PaginationParams:
    """
    Pagination dependency.

    Usage:
        @router.get("/items")
        def list_items(pagination: PaginationParams = Depends(get_pagination)):
            ...
    """
    return PaginationParams(page=page, limit=limit)


class Pagination(BaseModel):
    """Pagination block returned alongside list data."""
    page: int
    limit: int
    total: int
    totalPages: int

    @classmethod
    def create(cls, total: int, params: PaginationParams) -> "Pagination":
        return cls(
            page=params.page,
            limit=params.limit,
            total=total,
            totalPages=math.ceil(total / params.limit) if params.limit > 0 else 0,
        )


def paginate_query(query: SQLAlchemyQuery, params: PaginationParams) -> tuple[list, int]:
    """
    Apply pagination to a SQLAlchemy query.

    Returns:
        (items, total_count)
    """
    total = query.order_by(None).count()
    items = query.offset(params.offset).limit(params.limit).all()
    return items, total
