"""Auth service — JWT tokens, password hashing and user accounts."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from stepwise.config import get_settings
from stepwise.core.exceptions import (
    AuthenticationFailedError,
    ConflictError,
    EntityNotFoundError,
    ExpiredCredentialError,
    InvalidCredentialError,
    UnauthenticatedError,
    ValidationError,
)
from stepwise.core.results import action
from stepwise.domain.schemas.auth import TokenResponse, UserCreate, UserRead, UserUpdate
from stepwise.infrastructure.database import transaction
from stepwise.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

settings = get_settings()
logger = structlog.get_logger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


class TokenVerifier:
    """Issues and verifies signed bearer tokens carrying a user id in ``sub``."""

    def __init__(
        self,
        secret_key: str = settings.SECRET_KEY,
        algorithm: str = settings.JWT_ALGORITHM,
        expiration_minutes: int = settings.JWT_EXPIRATION_MINUTES,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expiration = timedelta(minutes=expiration_minutes)

    def create_access_token(self, data: dict, expires_delta: Optional[timedelta] = None) -> str:
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + (expires_delta or self.expiration)
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Return the user id carried by ``token``."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise ExpiredCredentialError()
        except JWTError:
            raise InvalidCredentialError()
        except Exception:
            logger.exception("Token verification failed")
            raise AuthenticationFailedError()

        user_id = payload.get("sub")
        if not user_id:
            raise InvalidCredentialError()
        return user_id

    def require_user_id(self, token: Optional[str]) -> str:
        if not token:
            raise UnauthenticatedError()
        return self.verify(token)

    def optional_user_id(self, token: Optional[str]) -> Optional[str]:
        """User id for a valid token; anonymous otherwise."""
        if not token:
            return None
        try:
            return self.verify(token)
        except (InvalidCredentialError, ExpiredCredentialError, AuthenticationFailedError):
            return None


class AuthService:
    """Registration, login and profile operations."""

    def __init__(self, db: Session, verifier: TokenVerifier):
        self.db = db
        self.verifier = verifier
        self.users = SQLAlchemyUserRepository(db)

    @action("Failed to create user. Please try again")
    def register_user(self, payload: UserCreate) -> TokenResponse:
        name = (payload.name or "").strip()
        email = (payload.email or "").strip().lower()
        if not name or not email or not payload.password:
            raise ValidationError("All fields are required")
        if self.users.get_by_email(email):
            raise ConflictError("User with this email already exists")
        if self.users.get_by_name(name):
            raise ConflictError("User with this name already exists")

        with transaction(self.db):
            user = self.users.create(
                {"name": name, "email": email, "password_hash": hash_password(payload.password)}
            )

        logger.info("User registered", user_id=user.id)
        return self._token_response(user)

    @action("Failed to log in. Please try again")
    def login_user(self, email: str, password: str) -> TokenResponse:
        user = self.users.get_by_email((email or "").strip().lower())
        if not user or not verify_password(password or "", user.password_hash):
            raise InvalidCredentialError("Invalid email or password")
        return self._token_response(user)

    @action("Failed to fetch profile. Please try again")
    def get_profile(self, token: Optional[str]) -> UserRead:
        return UserRead.model_validate(self._current_user(token))

    @action("Failed to update profile. Please try again")
    def update_profile(self, token: Optional[str], payload: UserUpdate) -> UserRead:
        user = self._current_user(token)
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")

        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise ValidationError("Name cannot be empty")
            other = self.users.get_by_name(name)
            if other and other.id != user.id:
                raise ConflictError("User with this name already exists")
            changes["name"] = name

        with transaction(self.db):
            user = self.users.update(user, changes)
        return UserRead.model_validate(user)

    def _current_user(self, token: Optional[str]):
        user_id = self.verifier.require_user_id(token)
        user = self.users.get_by_id(user_id)
        if not user:
            raise EntityNotFoundError("User not found")
        return user

    def _token_response(self, user) -> TokenResponse:
        token = self.verifier.create_access_token({"sub": user.id, "email": user.email})
        return TokenResponse(access_token=token, user=UserRead.model_validate(user))
