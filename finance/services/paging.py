import math

from finance.exceptions import ValidationFailure


def page_params(page, limit, *, default_limit: int = 10, max_limit: int = 100) -> tuple[int, int]:
    try:
        page = int(page or 1)
        limit = int(limit or default_limit)
    except (TypeError, ValueError):
        raise ValidationFailure('page and limit must be integers')
    if page < 1 or limit < 1:
        raise ValidationFailure('page and limit must be positive')
    return page, min(limit, max_limit)


def paginate(qs, page, limit, **kwargs):
    """Slice ``qs`` and return ``(items, pagination)``."""
    page, limit = page_params(page, limit, **kwargs)
    total = qs.count()
    offset = (page - 1) * limit
    items = list(qs[offset:offset + limit])
    return items, {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': math.ceil(total / limit) if total else 0,
    }
