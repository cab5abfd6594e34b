# agency_admin/core/query.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from sqlalchemy import Select, asc, desc
from sqlalchemy.sql.elements import ColumnElement


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    limit: int = 20

    @classmethod
    def normalize(cls, page: int | None, limit: int | None, max_limit: int = 200) -> "PageParams":
        p = max(int(page or 1), 1)
        lim = min(max(int(limit or 20), 1), max_limit)
        return cls(page=p, limit=lim)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return -(-total // self.limit) if total else 0

    def apply(self, stmt: Select) -> Select:
        return stmt.limit(self.limit).offset(self.offset)


@dataclass(frozen=True)
class SortParams:
    """
    Sort key resolved against an allow-list of columns. Unknown keys fall back
    to the default rather than reaching the SQL text.
    """

    key: str
    descending: bool

    @classmethod
    def normalize(
        cls,
        sort: str | None,
        order: str | None,
        allowed: Mapping[str, ColumnElement],
        default: str,
    ) -> "SortParams":
        key = (sort or "").strip()
        if key not in allowed:
            key = default
        direction = (order or "").strip().lower()
        return cls(key=key, descending=direction != "asc")

    def apply(self, stmt: Select, allowed: Mapping[str, ColumnElement]) -> Select:
        col = allowed[self.key]
        return stmt.order_by(desc(col) if self.descending else asc(col))
