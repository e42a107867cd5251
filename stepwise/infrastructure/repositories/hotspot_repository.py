"""
SQLAlchemy Implementation of Hotspot Repository.
"""

from typing import List

from stepwise.domain.models.hotspot import Hotspot
from stepwise.domain.repositories.hotspot_repository import HotspotRepository
from stepwise.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyHotspotRepository(SQLAlchemyRepository[Hotspot], HotspotRepository):
    """Hotspot repository implementation using SQLAlchemy."""

    model = Hotspot

    def list_by_step(self, step_id: str) -> List[Hotspot]:
        return (
            self.db.query(Hotspot)
            .filter(Hotspot.step_id == step_id)
            .order_by(Hotspot.created_at.asc())
            .all()
        )

    def delete_by_step(self, step_id: str) -> None:
        self.db.query(Hotspot).filter(Hotspot.step_id == step_id).delete(
            synchronize_session="fetch"
        )
        self.db.flush()
