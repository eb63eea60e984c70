# Overview: Shared page/limit handling for list endpoints.

from flask import current_app


DEFAULT_PAGE_SIZE = 20


def paginate(query, page: int | None = None, limit: int | None = None) -> dict:
    """
    Apply page/limit to an ordered query and serialize the rows.

    page is 1-indexed; limit is clamped to [1, MAX_PAGE_SIZE].
    Returns {"items", "page", "limit", "total"}.
    """
    max_size = current_app.config.get("MAX_PAGE_SIZE", 100)
    page = max(page or 1, 1)
    limit = min(max(limit or DEFAULT_PAGE_SIZE, 1), max_size)

    total = query.count()
    rows = query.offset((page - 1) * limit).limit(limit).all()

    return {
        "items": [row.to_dict() for row in rows],
        "page": page,
        "limit": limit,
        "total": total,
    }
