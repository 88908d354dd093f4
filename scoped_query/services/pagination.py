from __future__ import annotations

import math

from scoped_query.schemas.paging import PageMetadata


def skip_take(page: int, limit: int) -> tuple[int, int]:
    return (page - 1) * limit, limit


def metadata(page: int, limit: int, records: int, empty_pages: int = 0) -> PageMetadata:
    # A page past the end is not an error: callers get empty data with the same totals.
    pages = empty_pages if records == 0 else math.ceil(records / limit)
    return PageMetadata(current=page, limit=limit, records=records, pages=pages)
