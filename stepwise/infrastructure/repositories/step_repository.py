"""
SQLAlchemy Implementation of Step Repository.
"""

from typing import List

from sqlalchemy import func

from stepwise.domain.models.step import Step
from stepwise.domain.repositories.step_repository import StepRepository
from stepwise.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyStepRepository(SQLAlchemyRepository[Step], StepRepository):
    """Step repository implementation using SQLAlchemy."""

    model = Step

    def list_by_demo(self, demo_id: str) -> List[Step]:
        return (
            self.db.query(Step)
            .filter(Step.demo_id == demo_id)
            .order_by(Step.position.asc(), Step.created_at.asc())
            .all()
        )

    def next_position(self, demo_id: str) -> int:
        last = (
            self.db.query(func.max(Step.position)).filter(Step.demo_id == demo_id).scalar()
        )
        return (last or 0) + 1

    def count_by_image_url(self, image_url: str) -> int:
        return (
            self.db.query(func.count(Step.id)).filter(Step.image_url == image_url).scalar() or 0
        )
