"""
SQLAlchemy Implementation of Demo Repository.
"""

from typing import List, Optional, Set, Tuple

from sqlalchemy import func, or_

from stepwise.domain.models.demo import Demo
from stepwise.domain.models.step import Step
from stepwise.domain.repositories.demo_repository import DemoRepository
from stepwise.domain.schemas.demo import DemoFilter
from stepwise.infrastructure.repositories.base_repository import SQLAlchemyRepository

SORT_COLUMNS = {
    "title": Demo.title,
    "created_at": Demo.created_at,
    "updated_at": Demo.updated_at,
}


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLAlchemyDemoRepository(SQLAlchemyRepository[Demo], DemoRepository):
    """Demo repository implementation using SQLAlchemy."""

    model = Demo

    def find_by_id_or_slug(self, id_or_slug: str) -> List[Demo]:
        return (
            self.db.query(Demo)
            .filter(or_(Demo.id == id_or_slug, Demo.slug == id_or_slug))
            .all()
        )

    def get_by_slug(self, user_id: str, slug: str) -> Optional[Demo]:
        return (
            self.db.query(Demo)
            .filter(Demo.user_id == user_id, Demo.slug == slug)
            .first()
        )

    def slugs_like(self, user_id: str, base_slug: str) -> Set[str]:
        pattern = f"{escape_like(base_slug)}-%"
        rows = (
            self.db.query(Demo.slug)
            .filter(
                Demo.user_id == user_id,
                or_(Demo.slug == base_slug, Demo.slug.like(pattern, escape="\\")),
            )
            .all()
        )
        return {r[0] for r in rows}

    def get_with_filters(
        self, filters: DemoFilter, user_id: Optional[str] = None, public_only: bool = False
    ) -> Tuple[List[Demo], int]:
        """Get demos with filtering, sorting and pagination."""
        query = self.db.query(Demo)

        if user_id:
            query = query.filter(Demo.user_id == user_id)
        if public_only:
            query = query.filter(Demo.is_public.is_(True))
        elif filters.is_public is not None:
            query = query.filter(Demo.is_public.is_(filters.is_public))
        if filters.search:
            pattern = f"%{escape_like(filters.search)}%"
            query = query.filter(
                or_(
                    Demo.title.ilike(pattern, escape="\\"),
                    Demo.description.ilike(pattern, escape="\\"),
                )
            )

        total = query.count()

        column = SORT_COLUMNS[filters.sort_by]
        if filters.sort_order == "asc":
            ordering = (column.asc(), Demo.id.asc())
        else:
            ordering = (column.desc(), Demo.id.desc())

        demos = (
            query.order_by(*ordering)
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
            .all()
        )
        return demos, total

    def count_steps(self, demo_id: str) -> int:
        return (
            self.db.query(func.count(Step.id)).filter(Step.demo_id == demo_id).scalar() or 0
        )
