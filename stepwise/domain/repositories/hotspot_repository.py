"""
Hotspot Repository Interface.
Defines specific data access operations for Hotspots.
"""

from typing import List

from stepwise.domain.models.hotspot import Hotspot
from stepwise.domain.repositories.base import BaseRepository


class HotspotRepository(BaseRepository[Hotspot]):
    """Interface for Hotspot-specific operations."""

    def list_by_step(self, step_id: str) -> List[Hotspot]:
        """Hotspots placed on a step."""
        ...

    def delete_by_step(self, step_id: str) -> None:
        """Delete every hotspot placed on a step."""
        ...
