# Overview: Page/limit pagination shared by the list endpoints.

from __future__ import annotations

from typing import Callable

from ..validation import MAX_INT

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def paginate(query, *, page: int | None, limit: int | None, serialize: Callable) -> dict:
    """
    Slice a query into one page.

    Returns {"data": [...], "pagination": {total, page, limit, totalPages}}.
    limit defaults to 10 and is capped at 100; page is 1-indexed.
    """
    limit = min(max(limit or DEFAULT_LIMIT, 1), MAX_LIMIT)
    page = min(max(page or 1, 1), MAX_INT // limit)

    total = query.order_by(None).count()
    total_pages = (total + limit - 1) // limit if total > 0 else 1

    rows = query.offset((page - 1) * limit).limit(limit).all()

    return {
        "data": [serialize(row) for row in rows],
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": total_pages,
        },
    }
