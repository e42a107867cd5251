"""FastAPI dependency — bearer credentials."""

from typing import Optional, TypeVar

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from stepwise.core.results import ActionResult

T = TypeVar("T")

security = HTTPBearer(auto_error=False)


def get_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Raw bearer token, if any. Services decide whether it is required."""
    if credentials is None:
        return None
    return credentials.credentials


def respond(result: ActionResult[T]) -> ActionResult[T]:
    """Pass a successful result through; raise the failure for the exception handler."""
    result.unwrap()
    return result
