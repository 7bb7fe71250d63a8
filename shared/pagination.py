import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

from fastapi import Query
from pydantic import BaseModel

T = TypeVar("T")

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageParams:
    page: int = 0
    size: int = 20

    @property
    def offset(self) -> int:
        return self.page * self.size


def page_params(
    page: int = Query(default=0, ge=0, description="Page index, 0-based"),
    size: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE, description="Page size"),
) -> PageParams:
    return PageParams(page=page, size=size)


class PagedResponse(BaseModel, Generic[T]):
    content: list[T]
    page_number: int
    page_size: int
    total_elements: int
    total_pages: int
    last: bool

    @classmethod
    def of(cls, items: Sequence, total: int, params: PageParams) -> "PagedResponse":
        total_pages = math.ceil(total / params.size) if total else 0
        return cls(
            content=list(items),
            page_number=params.page,
            page_size=params.size,
            total_elements=total,
            total_pages=total_pages,
            last=params.page >= total_pages - 1,
        )
