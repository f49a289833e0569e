from sqlalchemy.orm import Query
from bank_portal.core.config import settings
from bank_portal.core.errors import ValidationError
from datetime import date, datetime, time
from typing import Optional, Tuple
import math


def normalize_page(page: Optional[int], limit: Optional[int]) -> Tuple[int, int]:
    page = 1 if page is None else int(page)
    limit = settings.DEFAULT_PAGE_SIZE if limit is None else int(limit)
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive")
    return page, limit


def paginate(query: Query, page: Optional[int] = None, limit: Optional[int] = None) -> dict:
    """Apply 1-based pagination to an ordered query.

    Returns ``{"data": [...], "pagination": {page, limit, total, total_pages}}``.
    """
    page, limit = normalize_page(page, limit)
    total = query.order_by(None).count()
    data = query.offset((page - 1) * limit).limit(limit).all()
    return {
        "data": data,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit),
        },
    }


def start_of_day(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def end_of_day(value) -> Optional[datetime]:
    """Inclusive upper bound for a date filter: 23:59:59.999 of that day."""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time(23, 59, 59, 999000))


def apply_date_range(query: Query, column, start_date: Optional[date] = None, end_date: Optional[date] = None) -> Query:
    if start_date is not None:
        query = query.filter(column >= start_of_day(start_date))
    if end_date is not None:
        query = query.filter(column <= end_of_day(end_date))
    return query
