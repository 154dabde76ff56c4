# workhub_api/common/paging.py
from flask import request

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

def page_limit(default_limit=DEFAULT_LIMIT):
    try:
        page = max(int(request.args.get("page", DEFAULT_PAGE)), 1)
    except (TypeError, ValueError):
        page = DEFAULT_PAGE
    raw = request.args.get("limit", request.args.get("size"))
    try:
        limit = int(raw) if raw is not None else default_limit
        limit = max(1, min(limit, MAX_LIMIT))
    except (TypeError, ValueError):
        limit = default_limit
    return page, limit

def pagination(page: int, limit: int, total: int) -> dict:
    """Page block in the shape the dashboard tables consume."""
    total_pages = (total + limit - 1) // limit if limit else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalCount": total,
        "limit": limit,
        "hasNextPage": page < total_pages,
        "hasPreviousPage": page > 1,
    }

def text_q(*names: str):
    for n in names or ("q",):
        q = (request.args.get(n) or "").strip()
        if q:
            return q
    return None
