"""User Repository Interface."""

from typing import Optional

from stepwise.domain.models.user import User
from stepwise.domain.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    def get_by_email(self, email: str) -> Optional[User]:
        ...

    def get_by_name(self, name: str) -> Optional[User]:
        ...
