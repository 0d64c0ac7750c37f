"""Page/limit handling shared by the list endpoints."""

from typing import Any

from flask import current_app, request
from marshmallow import Schema, fields
from sqlalchemy.orm import Query

from task_manager.utils import MAX_DB_INT


class PaginationSchema(Schema):
    """Pagination metadata returned alongside every list."""

    page = fields.Int()
    limit = fields.Int()
    total = fields.Int()
    pages = fields.Int()


def get_page_args() -> tuple[int, int]:
    """Read ``page`` and ``limit`` from the query string.

    Missing, malformed, non-positive or oversized values fall back to the
    defaults; ``limit`` is capped at ``MAX_PAGE_SIZE``.

    Returns:
        Tuple of (page, limit).
    """
    default_limit = current_app.config.get("DEFAULT_PAGE_SIZE", 10)
    max_limit = current_app.config.get("MAX_PAGE_SIZE", 100)

    page = request.args.get("page", 1, type=int)
    limit = request.args.get("limit", default_limit, type=int)

    if page is None or not 1 <= page <= MAX_DB_INT:
        page = 1
    if limit is None or limit < 1:
        limit = default_limit

    return page, min(limit, max_limit)


def paginated_response(query: Query, schema: Schema) -> dict[str, Any]:
    """Paginate a query using the request's page args and serialize it.

    Args:
        query: Ordered SQLAlchemy query.
        schema: Schema used to dump each item (``many`` is handled here).

    Returns:
        Dict with ``data`` and ``pagination`` keys, ready for jsonify.
    """
    page, limit = get_page_args()
    pagination = query.paginate(page=page, per_page=limit, error_out=False)  # type: ignore[attr-defined]

    return {
        "data": schema.dump(pagination.items, many=True),
        "pagination": PaginationSchema().dump(
            {
                "page": page,
                "limit": limit,
                "total": pagination.total,
                "pages": pagination.pages,
            }
        ),
    }
