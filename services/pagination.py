"""
Pagination and search helpers shared by every listing screen.

Listings are offset/limit pages (``offset = (page - 1) * limit``). Searches are
different on purpose: a search returns one unpaginated page holding at most
``SEARCH_RESULT_CAP`` matches, and its summary always reports a single page.
"""
from dataclasses import dataclass, field
from typing import Any, List, Sequence
from sqlalchemy import or_
from utils.helpers import page_count

SEARCH_RESULT_CAP = 20


@dataclass(frozen=True)
class Pagination:
    total: int
    page: int
    limit: int
    total_pages: int

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def prev_page(self) -> int:
        return self.page - 1

    @property
    def next_page(self) -> int:
        return self.page + 1

    def as_dict(self) -> dict:
        return {
            'total': self.total,
            'page': self.page,
            'limit': self.limit,
            'totalPages': self.total_pages,
        }


@dataclass
class Page:
    items: List[Any] = field(default_factory=list)
    pagination: Pagination = None

    @classmethod
    def from_flask(cls, result) -> 'Page':
        """Builds a page from a Flask-SQLAlchemy ``Pagination`` result."""
        total = result.total or 0
        return cls(
            items=list(result.items),
            pagination=Pagination(
                total=total,
                page=result.page,
                limit=result.per_page,
                total_pages=page_count(total, result.per_page),
            ),
        )

    @classmethod
    def unpaginated(cls, rows: Sequence[Any]) -> 'Page':
        """Search results: everything on page 1, reported as one page even when empty."""
        rows = list(rows)
        return cls(
            items=rows,
            pagination=Pagination(total=len(rows), page=1, limit=len(rows), total_pages=1),
        )

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


LIKE_ESCAPE = '\\'


def escape_like(term: str) -> str:
    """Makes ``%`` and ``_`` in a search term match literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace('%', LIKE_ESCAPE + '%')
        .replace('_', LIKE_ESCAPE + '_')
    )


def search_clause(columns, term: str):
    """Case-insensitive substring match on any of ``columns``."""
    pattern = f"%{escape_like(term)}%"
    return or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in columns))


def paginate(storage, stmt, page: int, limit: int) -> Page:
    return Page.from_flask(storage.paginate(stmt, page=page, limit=limit))


def search(storage, stmt, columns, term: str, cap: int = SEARCH_RESULT_CAP) -> Page:
    stmt = stmt.where(search_clause(columns, term)).limit(cap)
    rows = storage.session.execute(stmt).scalars().all()
    return Page.unpaginated(rows)
