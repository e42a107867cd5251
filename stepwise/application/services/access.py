"""Visibility and ownership rules shared by the demo, step and hotspot services.

A private demo is indistinguishable from a missing one for anybody but its
owner; a visible demo that belongs to somebody else is read-only.
"""

from typing import Optional

from stepwise.core.exceptions import EntityNotFoundError, ForbiddenError
from stepwise.domain.models.demo import Demo


def can_view(demo: Demo, user_id: Optional[str]) -> bool:
    return bool(demo.is_public) or (user_id is not None and demo.user_id == user_id)


def ensure_visible(
    demo: Optional[Demo], user_id: Optional[str], not_found: str = "Demo not found"
) -> Demo:
    if demo is None or not can_view(demo, user_id):
        raise EntityNotFoundError(not_found)
    return demo


def ensure_owner(
    demo: Optional[Demo],
    user_id: Optional[str],
    verb: str = "modify",
    not_found: str = "Demo not found",
) -> Demo:
    demo = ensure_visible(demo, user_id, not_found)
    if demo.user_id != user_id:
        raise ForbiddenError(f"You don't have permission to {verb} this demo")
    return demo
