"""Slug service — URL-safe demo identifiers, unique per owner."""

import re
import unicodedata
from typing import Callable, TypeVar

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stepwise.config import get_settings
from stepwise.core.exceptions import ConflictError
from stepwise.domain.repositories.demo_repository import DemoRepository

settings = get_settings()
logger = structlog.get_logger(__name__)

T = TypeVar("T")

FALLBACK_SLUG = "demo"

# Path segments under /api/demos that a slug would be shadowed by.
RESERVED_SLUGS = frozenset({"public"})


def generate_slug(title: str, max_length: int = settings.SLUG_MAX_LENGTH) -> str:
    """Lowercase ASCII words joined by hyphens. ``generate_slug(generate_slug(t)) == generate_slug(t)``."""
    normalized = unicodedata.normalize("NFKD", title or "")
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_text.lower()).strip("-")
    slug = slug[:max_length].rstrip("-")
    return slug or FALLBACK_SLUG


def _with_suffix(base_slug: str, n: int, max_length: int) -> str:
    suffix = f"-{n}"
    return f"{base_slug[: max_length - len(suffix)].rstrip('-')}{suffix}"


def allocate_slug(
    repo: DemoRepository, user_id: str, title: str, max_length: int = settings.SLUG_MAX_LENGTH
) -> str:
    """First free slug for ``title`` among the demos owned by ``user_id``.

    ``product-tour`` is taken -> ``product-tour-1`` -> ``product-tour-2`` ...
    """
    base_slug = generate_slug(title, max_length)
    taken = repo.slugs_like(user_id, base_slug)
    if base_slug not in taken and base_slug not in RESERVED_SLUGS:
        return base_slug

    n = 1
    while True:
        candidate = _with_suffix(base_slug, n, max_length)
        if candidate not in taken and not repo.get_by_slug(user_id, candidate):
            return candidate
        n += 1


def insert_with_unique_slug(
    db: Session,
    repo: DemoRepository,
    user_id: str,
    title: str,
    insert: Callable[[str], T],
    max_attempts: int = settings.SLUG_MAX_ATTEMPTS,
) -> T:
    """Allocate a slug and run ``insert(slug)`` in a transaction.

    The unique (user_id, slug) constraint settles races between concurrent
    creations: the loser rolls back and allocates again. Any other integrity
    failure propagates unchanged.
    """
    for attempt in range(1, max_attempts + 1):
        slug = allocate_slug(repo, user_id, title)
        try:
            result = insert(slug)
            db.commit()
            return result
        except IntegrityError:
            db.rollback()
            if repo.get_by_slug(user_id, slug) is None:
                raise
            logger.warning("Slug taken concurrently, retrying", slug=slug, attempt=attempt)

    raise ConflictError("A demo with this slug already exists")
