"""SQLAlchemy implementation of the User Repository."""

from typing import Optional

from stepwise.domain.models.user import User
from stepwise.domain.repositories.user_repository import UserRepository
from stepwise.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyUserRepository(SQLAlchemyRepository[User], UserRepository):
    model = User

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_by_name(self, name: str) -> Optional[User]:
        return self.db.query(User).filter(User.name == name).first()
