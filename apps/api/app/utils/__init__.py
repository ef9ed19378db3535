"""Utility modules."""

from app.utils.normalization import (
    is_valid_email,
    normalize_email,
    normalize_identifier,
    normalize_name,
    parse_uuid,
)
from app.utils.pagination import (
    Pagination,
    PaginationParams,
    get_pagination,
    paginate_query,
)

__all__ = [
    # Normalization
    "is_valid_email",
    "normalize_email",
    "normalize_identifier",
    "normalize_name",
    "parse_uuid",
    # Pagination
    "Pagination",
    "PaginationParams",
    "get_pagination",
    "paginate_query",
]
