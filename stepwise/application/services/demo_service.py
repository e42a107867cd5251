"""Demo service — create, read, update, share and duplicate demos."""

from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stepwise.application.services.access import ensure_owner, ensure_visible
from stepwise.application.services.auth_service import TokenVerifier
from stepwise.application.services.slug_service import (
    RESERVED_SLUGS,
    generate_slug,
    insert_with_unique_slug,
)
from stepwise.application.services.upload_service import release_images
from stepwise.core.exceptions import ConflictError, EntityNotFoundError, ValidationError
from stepwise.core.results import action
from stepwise.domain.models.demo import Demo
from stepwise.domain.schemas.common import MessageResponse
from stepwise.domain.schemas.demo import (
    DemoCreate,
    DemoFilter,
    DemoList,
    DemoRead,
    DemoUpdate,
    DemoWithSteps,
    DemoWithStepsCount,
)
from stepwise.domain.schemas.hotspot import HotspotRead
from stepwise.domain.schemas.step import StepRead, StepWithHotspots
from stepwise.infrastructure.database import transaction
from stepwise.infrastructure.repositories.demo_repository import SQLAlchemyDemoRepository
from stepwise.infrastructure.repositories.hotspot_repository import SQLAlchemyHotspotRepository
from stepwise.infrastructure.repositories.step_repository import SQLAlchemyStepRepository
from stepwise.infrastructure.storage import StorageClient

logger = structlog.get_logger(__name__)


class DemoService:
    def __init__(self, db: Session, verifier: TokenVerifier, storage: Optional[StorageClient] = None):
        self.db = db
        self.verifier = verifier
        self.storage = storage
        self.demos = SQLAlchemyDemoRepository(db)
        self.steps = SQLAlchemyStepRepository(db)
        self.hotspots = SQLAlchemyHotspotRepository(db)

    @action("Failed to create demo. Please try again")
    def create_demo(self, payload: DemoCreate, token: Optional[str]) -> DemoRead:
        user_id = self.verifier.require_user_id(token)
        title = (payload.title or "").strip()
        if not title:
            raise ValidationError("Title is required")

        demo = insert_with_unique_slug(
            self.db,
            self.demos,
            user_id,
            title,
            lambda slug: self.demos.create(
                {
                    "title": title,
                    "slug": slug,
                    "description": payload.description,
                    "user_id": user_id,
                    "is_public": payload.is_public,
                }
            ),
        )
        logger.info("Demo created", demo_id=demo.id, slug=demo.slug, user_id=user_id)
        return DemoRead.model_validate(demo)

    @action("Failed to fetch demos. Please try again")
    def list_demos(self, token: Optional[str], filters: Optional[DemoFilter] = None) -> DemoList:
        user_id = self.verifier.require_user_id(token)
        return self._page(filters or DemoFilter(), user_id=user_id)

    @action("Failed to fetch public demos. Please try again")
    def list_public_demos(self, filters: Optional[DemoFilter] = None) -> DemoList:
        return self._page(filters or DemoFilter(), public_only=True)

    @action("Failed to fetch demo. Please try again")
    def get_demo(self, id_or_slug: str, token: Optional[str] = None) -> DemoRead:
        demo = self._find_visible(id_or_slug, self.verifier.optional_user_id(token))
        return DemoRead.model_validate(demo)

    @action("Failed to fetch demo. Please try again")
    def get_demo_with_steps_count(
        self, id_or_slug: str, token: Optional[str] = None
    ) -> DemoWithStepsCount:
        demo = self._find_visible(id_or_slug, self.verifier.optional_user_id(token))
        return DemoWithStepsCount(
            **DemoRead.model_validate(demo).model_dump(),
            steps_count=self.demos.count_steps(demo.id),
        )

    @action("Failed to fetch demo. Please try again")
    def get_demo_with_steps(self, id_or_slug: str, token: Optional[str] = None) -> DemoWithSteps:
        demo = self._find_visible(id_or_slug, self.verifier.optional_user_id(token))
        steps = [
            StepWithHotspots(
                **StepRead.model_validate(step).model_dump(),
                hotspots=[HotspotRead.model_validate(h) for h in self.hotspots.list_by_step(step.id)],
            )
            for step in self.steps.list_by_demo(demo.id)
        ]
        return DemoWithSteps(**DemoRead.model_validate(demo).model_dump(), steps=steps)

    @action("Failed to update demo. Please try again")
    def update_demo(self, demo_id: str, payload: DemoUpdate, token: Optional[str]) -> DemoRead:
        user_id = self.verifier.require_user_id(token)
        demo = ensure_owner(self.demos.get_by_id(demo_id), user_id, "update")

        changes = payload.model_dump(exclude_unset=True)
        if changes.get("is_public", False) is None:
            del changes["is_public"]
        if not changes:
            raise ValidationError("No fields to update")

        if "title" in changes:
            changes["title"] = (changes["title"] or "").strip()
            if not changes["title"]:
                raise ValidationError("Title cannot be empty")
        if "slug" in changes:
            if not (changes["slug"] or "").strip():
                raise ValidationError("Slug cannot be empty")
            slug = generate_slug(changes["slug"])
            if slug in RESERVED_SLUGS:
                raise ValidationError(f"The slug '{slug}' is reserved")
            existing = self.demos.get_by_slug(user_id, slug)
            if existing and existing.id != demo.id:
                raise ConflictError("A demo with this slug already exists")
            changes["slug"] = slug

        try:
            with transaction(self.db):
                demo = self.demos.update(demo, changes)
        except IntegrityError:
            raise ConflictError("A demo with this slug already exists")

        logger.info("Demo updated", demo_id=demo.id, fields=sorted(changes))
        return DemoRead.model_validate(demo)

    @action("Failed to delete demo. Please try again")
    def delete_demo(self, demo_id: str, token: Optional[str]) -> MessageResponse:
        user_id = self.verifier.require_user_id(token)
        demo = ensure_owner(self.demos.get_by_id(demo_id), user_id, "delete")
        image_urls = [step.image_url for step in self.steps.list_by_demo(demo.id)]

        with transaction(self.db):
            self.demos.delete(demo)

        logger.info("Demo deleted", demo_id=demo_id, steps=len(image_urls))
        release_images(self.steps, self.storage, image_urls)
        return MessageResponse(message="Demo deleted successfully")

    @action("Failed to update demo visibility. Please try again")
    def toggle_visibility(self, demo_id: str, token: Optional[str]) -> DemoRead:
        user_id = self.verifier.require_user_id(token)
        demo = ensure_owner(self.demos.get_by_id(demo_id), user_id, "modify")

        with transaction(self.db):
            demo = self.demos.update(demo, {"is_public": not demo.is_public})
        return DemoRead.model_validate(demo)

    @action("Failed to duplicate demo. Please try again")
    def duplicate_demo(self, demo_id: str, token: Optional[str]) -> DemoRead:
        """Copy a demo with its steps and hotspots into a new private demo of the caller.

        Copied steps keep the original image URLs; hotspot links are remapped
        onto the copied steps.
        """
        user_id = self.verifier.require_user_id(token)
        original = ensure_visible(self.demos.get_by_id(demo_id), user_id)
        title = f"{original.title} (Copy)"

        def insert(slug: str) -> Demo:
            copy = self.demos.create(
                {
                    "title": title,
                    "slug": slug,
                    "description": original.description,
                    "user_id": user_id,
                    "is_public": False,
                }
            )
            source_steps = self.steps.list_by_demo(original.id)
            step_ids = {}
            for step in source_steps:
                step_ids[step.id] = self.steps.create(
                    {
                        "demo_id": copy.id,
                        "title": step.title,
                        "description": step.description,
                        "image_url": step.image_url,
                        "position": step.position,
                    }
                ).id
            for step in source_steps:
                for hotspot in self.hotspots.list_by_step(step.id):
                    self.hotspots.create(
                        {
                            "step_id": step_ids[step.id],
                            "x": hotspot.x,
                            "y": hotspot.y,
                            "width": hotspot.width,
                            "height": hotspot.height,
                            "color": hotspot.color,
                            "border_radius": hotspot.border_radius,
                            "tooltip_text": hotspot.tooltip_text,
                            "tooltip_placement": hotspot.tooltip_placement,
                            "target_step_id": step_ids.get(hotspot.target_step_id),
                        }
                    )
            return copy

        copy = insert_with_unique_slug(self.db, self.demos, user_id, title, insert)
        logger.info("Demo duplicated", source_id=demo_id, demo_id=copy.id, user_id=user_id)
        return DemoRead.model_validate(copy)

    def _page(self, filters: DemoFilter, user_id: Optional[str] = None, public_only: bool = False) -> DemoList:
        demos, total = self.demos.get_with_filters(filters, user_id=user_id, public_only=public_only)
        return DemoList(
            demos=[DemoRead.model_validate(d) for d in demos],
            total=total,
            page=filters.page,
            limit=filters.limit,
            total_pages=(total + filters.limit - 1) // filters.limit,
        )

    def _find_visible(self, id_or_slug: str, user_id: Optional[str]) -> Demo:
        """Resolve an id or slug to a demo the caller may see.

        Slugs are only unique per owner, so a slug match prefers the caller's
        own demo, then the oldest public one.
        """
        if not id_or_slug:
            raise ValidationError("Demo id or slug is required")

        candidates = self.demos.find_by_id_or_slug(id_or_slug)
        for demo in candidates:
            if demo.id == id_or_slug:
                return ensure_visible(demo, user_id)

        owned = [d for d in candidates if user_id and d.user_id == user_id]
        if owned:
            return owned[0]
        public = sorted((d for d in candidates if d.is_public), key=lambda d: d.created_at)
        if public:
            return public[0]
        raise EntityNotFoundError("Demo not found")
