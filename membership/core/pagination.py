import math
from dataclasses import dataclass
from typing import Optional

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Pagination:
    skip: int
    take: int
    page: int
    page_size: int


@dataclass(frozen=True)
class PaginationMetadata:
    current_page: int
    page_size: int
    total_count: int
    total_pages: int

    def as_dict(self) -> dict:
        return {
            "currentPage": self.current_page,
            "pageSize": self.page_size,
            "totalCount": self.total_count,
            "totalPages": self.total_pages,
        }


def paginate(page: Optional[int] = None, page_size: Optional[int] = None) -> Pagination:
    """
    Offset arithmetic for list endpoints. Inputs arrive range-checked from
    the query layer; this only fills in defaults.
    """
    page = DEFAULT_PAGE if page is None else int(page)
    page_size = DEFAULT_PAGE_SIZE if page_size is None else int(page_size)

    if page < 1:
        raise ValueError("page must be >= 1")
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")

    return Pagination(
        skip=(page - 1) * page_size,
        take=page_size,
        page=page,
        page_size=page_size,
    )


def pagination_metadata(current_page: int, page_size: int, total_count: int) -> PaginationMetadata:
    # Pages past the end are still reported; they just select nothing upstream.
    if total_count == 0:
        total_pages = 0
    else:
        total_pages = math.ceil(total_count / page_size)

    return PaginationMetadata(
        current_page=int(current_page),
        page_size=int(page_size),
        total_count=int(total_count),
        total_pages=int(total_pages),
    )
