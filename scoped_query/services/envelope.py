from typing import Any

from scoped_query.schemas.paging import PageMetadata, PagedResult


def build(page_metadata: PageMetadata, mapped_rows: list[dict[str, Any]]) -> PagedResult:
    return PagedResult(pagination=page_metadata, data=list(mapped_rows))
