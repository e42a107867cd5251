"""
Demo Repository Interface.
Defines specific data access operations for Demos.
"""

from typing import List, Optional, Set, Tuple

from stepwise.domain.models.demo import Demo
from stepwise.domain.repositories.base import BaseRepository
from stepwise.domain.schemas.demo import DemoFilter


class DemoRepository(BaseRepository[Demo]):
    """Interface for Demo-specific operations."""

    def find_by_id_or_slug(self, id_or_slug: str) -> List[Demo]:
        """Demos whose id or slug equals the given value."""
        ...

    def get_by_slug(self, user_id: str, slug: str) -> Optional[Demo]:
        """Demo owned by ``user_id`` with this slug."""
        ...

    def slugs_like(self, user_id: str, base_slug: str) -> Set[str]:
        """Slugs of ``user_id`` equal to ``base_slug`` or starting with ``base_slug-``."""
        ...

    def get_with_filters(
        self, filters: DemoFilter, user_id: Optional[str] = None, public_only: bool = False
    ) -> Tuple[List[Demo], int]:
        """Filtered page of demos plus the total count matching the filters."""
        ...

    def count_steps(self, demo_id: str) -> int:
        """Number of steps in a demo."""
        ...
