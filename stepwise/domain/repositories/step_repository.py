"""
Step Repository Interface.
Defines specific data access operations for Steps.
"""

from typing import List

from stepwise.domain.models.step import Step
from stepwise.domain.repositories.base import BaseRepository


class StepRepository(BaseRepository[Step]):
    """Interface for Step-specific operations."""

    def list_by_demo(self, demo_id: str) -> List[Step]:
        """Steps of a demo ordered by position, then creation time."""
        ...

    def next_position(self, demo_id: str) -> int:
        """Position right after the last step of a demo."""
        ...

    def count_by_image_url(self, image_url: str) -> int:
        """Number of steps still pointing at an image."""
        ...
