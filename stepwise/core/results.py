"""
Result envelope returned by every domain operation.

Callers receive ``ActionResult(success=True, data=...)`` or
``ActionResult(success=False, error=..., code=...)`` and never a raw exception.
"""

import functools
from typing import Callable, Generic, Optional, TypeVar

import httpx
import structlog
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError

from stepwise.core.exceptions import AppError, ErrorKind, error_for

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DATABASE_UNAVAILABLE = "Database connection failed. Please try again later"
STORAGE_UNAVAILABLE = "Storage service unavailable. Please try again later"


class ActionResult(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    code: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: T = None) -> "ActionResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> "ActionResult[T]":
        return cls(success=False, error=message, code=kind)

    def unwrap(self) -> T:
        """Return ``data`` or raise the matching AppError."""
        if not self.success:
            raise error_for(self.code or ErrorKind.INFRASTRUCTURE, self.error or "")
        return self.data


def action(fallback_message: str) -> Callable:
    """Wrap a service method so that every failure becomes a failed ActionResult.

    The wrapped method returns plain data; the owning object may expose a
    ``db`` session, which is rolled back whenever the call fails.
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs) -> ActionResult:
            try:
                return ActionResult.ok(func(self, *args, **kwargs))
            except AppError as exc:
                _rollback(self)
                logger.warning(
                    "Action rejected",
                    action=func.__qualname__,
                    kind=exc.kind.value,
                    error=exc.message,
                )
                return ActionResult.fail(exc.kind, exc.message)
            except IntegrityError:
                _rollback(self)
                logger.warning("Action hit a constraint violation", action=func.__qualname__)
                return ActionResult.fail(ErrorKind.CONFLICT, "A conflicting record already exists")
            except (OperationalError, InterfaceError):
                _rollback(self)
                logger.exception("Database unavailable", action=func.__qualname__)
                return ActionResult.fail(ErrorKind.INFRASTRUCTURE, DATABASE_UNAVAILABLE)
            except httpx.TransportError:
                _rollback(self)
                logger.exception("Storage unavailable", action=func.__qualname__)
                return ActionResult.fail(ErrorKind.INFRASTRUCTURE, STORAGE_UNAVAILABLE)
            except Exception:
                _rollback(self)
                logger.exception("Action failed", action=func.__qualname__)
                return ActionResult.fail(ErrorKind.INFRASTRUCTURE, fallback_message)

        return wrapper

    return decorator


def _rollback(owner) -> None:
    db = getattr(owner, "db", None)
    if db is None:
        return
    try:
        db.rollback()
    except Exception:
        logger.exception("Rollback failed")
