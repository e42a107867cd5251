"""Step service — ordered screens of a demo."""

from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from stepwise.application.services.access import ensure_owner, ensure_visible
from stepwise.application.services.auth_service import TokenVerifier
from stepwise.application.services.hotspot_service import HotspotService
from stepwise.application.services.upload_service import release_images
from stepwise.core.exceptions import EntityNotFoundError, ValidationError
from stepwise.core.results import action
from stepwise.domain.models.step import Step
from stepwise.domain.schemas.common import MessageResponse
from stepwise.domain.schemas.hotspot import HotspotCreate
from stepwise.domain.schemas.step import (
    StepCreate,
    StepRead,
    StepUpdate,
    StepWithHotspots,
    StepWithHotspotsCreate,
)
from stepwise.infrastructure.database import transaction
from stepwise.infrastructure.repositories.demo_repository import SQLAlchemyDemoRepository
from stepwise.infrastructure.repositories.step_repository import SQLAlchemyStepRepository
from stepwise.infrastructure.storage import StorageClient

logger = structlog.get_logger(__name__)


class StepService:
    def __init__(self, db: Session, verifier: TokenVerifier, storage: Optional[StorageClient] = None):
        self.db = db
        self.verifier = verifier
        self.storage = storage
        self.demos = SQLAlchemyDemoRepository(db)
        self.steps = SQLAlchemyStepRepository(db)

    @action("Failed to create step. Please try again")
    def create_step(self, payload: StepCreate, token: Optional[str], demo_id: str) -> StepRead:
        user_id = self.verifier.require_user_id(token)
        if not demo_id:
            raise ValidationError("Demo Id is required")
        demo = ensure_owner(self.demos.get_by_id(demo_id), user_id)

        title = (payload.title or "").strip()
        if not title:
            raise ValidationError("Title is required")
        if not payload.image_url:
            raise ValidationError("Image URL is required")

        position = payload.position
        if position is None:
            position = self.steps.next_position(demo.id)

        with transaction(self.db):
            step = self.steps.create(
                {
                    "demo_id": demo.id,
                    "title": title,
                    "description": payload.description,
                    "image_url": payload.image_url,
                    "position": position,
                }
            )

        logger.info("Step created", step_id=step.id, demo_id=demo.id, position=position)
        return StepRead.model_validate(step)

    @action("Failed to create step. Please try again")
    def create_step_with_hotspots(
        self, demo_id: str, payload: StepWithHotspotsCreate, token: Optional[str]
    ) -> StepWithHotspots:
        """Create the step, then each hotspot on its own.

        The step stays committed when some hotspots are rejected; the result
        lists the hotspots that were created.
        """
        step_payload = StepCreate(**payload.model_dump(exclude={"hotspots"}, exclude_unset=True))
        step = self.create_step(step_payload, token, demo_id).unwrap()

        hotspot_service = HotspotService(self.db, self.verifier)
        created = []
        for index, draft in enumerate(payload.hotspots):
            result = hotspot_service.create_hotspot(
                HotspotCreate(**draft.model_dump(), step_id=step.id), token
            )
            if result.success:
                created.append(result.data)
            else:
                logger.warning(
                    "Hotspot skipped", step_id=step.id, index=index, error=result.error
                )

        return StepWithHotspots(**step.model_dump(), hotspots=created)

    @action("Failed to fetch steps. Please try again")
    def list_steps(self, demo_id: str, token: Optional[str] = None) -> List[StepRead]:
        if not demo_id:
            raise ValidationError("Demo Id is required")
        demo = ensure_visible(self.demos.get_by_id(demo_id), self.verifier.optional_user_id(token))
        return [StepRead.model_validate(s) for s in self.steps.list_by_demo(demo.id)]

    @action("Failed to fetch steps. Please try again")
    def list_steps_public(self, demo_id: str) -> List[StepRead]:
        if not demo_id:
            raise ValidationError("Demo Id is required")
        demo = ensure_visible(self.demos.get_by_id(demo_id), None)
        return [StepRead.model_validate(s) for s in self.steps.list_by_demo(demo.id)]

    @action("Failed to fetch step. Please try again")
    def get_step(self, step_id: str) -> StepRead:
        if not step_id:
            raise ValidationError("Step Id is required")
        step = self.steps.get_by_id(step_id)
        if not step:
            raise EntityNotFoundError("Step not found")
        return StepRead.model_validate(step)

    @action("Failed to update step. Please try again")
    def update_step(self, step_id: str, payload: StepUpdate, token: Optional[str]) -> StepRead:
        user_id = self.verifier.require_user_id(token)
        step = self._owned_step(step_id, user_id)

        changes = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or field == "description"
        }
        if not changes:
            raise ValidationError("No fields to update")
        if "title" in changes:
            changes["title"] = changes["title"].strip()
            if not changes["title"]:
                raise ValidationError("Title cannot be empty")
        if "image_url" in changes and not changes["image_url"]:
            raise ValidationError("Image URL cannot be empty")

        old_image = step.image_url
        with transaction(self.db):
            step = self.steps.update(step, changes)

        if changes.get("image_url", old_image) != old_image:
            release_images(self.steps, self.storage, [old_image])
        return StepRead.model_validate(step)

    @action("Failed to change step order. Please try again")
    def change_step_order(self, step_id: str, position: int, token: Optional[str]) -> List[StepRead]:
        """Move one step to ``position`` (1-based) and renumber the demo's steps 1..n."""
        user_id = self.verifier.require_user_id(token)
        step = self._owned_step(step_id, user_id)

        ordered = [s for s in self.steps.list_by_demo(step.demo_id) if s.id != step.id]
        index = min(max(position, 1), len(ordered) + 1) - 1
        ordered.insert(index, step)

        with transaction(self.db):
            self._renumber(ordered)
        return [StepRead.model_validate(s) for s in ordered]

    @action("Failed to reorder steps. Please try again")
    def reorder_steps(self, demo_id: str, step_ids: List[str], token: Optional[str]) -> List[StepRead]:
        user_id = self.verifier.require_user_id(token)
        if not demo_id:
            raise ValidationError("Demo Id is required")
        demo = ensure_owner(self.demos.get_by_id(demo_id), user_id)

        by_id = {s.id: s for s in self.steps.list_by_demo(demo.id)}
        if len(step_ids) != len(by_id) or set(step_ids) != set(by_id):
            raise ValidationError("Step order must list every step of the demo exactly once")

        ordered = [by_id[i] for i in step_ids]
        with transaction(self.db):
            self._renumber(ordered)

        logger.info("Steps reordered", demo_id=demo.id, count=len(ordered))
        return [StepRead.model_validate(s) for s in ordered]

    @action("Failed to delete step. Please try again")
    def delete_step(self, step_id: str, token: Optional[str]) -> MessageResponse:
        user_id = self.verifier.require_user_id(token)
        step = self._owned_step(step_id, user_id, "delete")
        image_url = step.image_url

        with transaction(self.db):
            self.steps.delete(step)

        logger.info("Step deleted", step_id=step_id)
        release_images(self.steps, self.storage, [image_url])
        return MessageResponse(message="Step deleted successfully")

    def _renumber(self, ordered: List[Step]) -> None:
        for position, step in enumerate(ordered, start=1):
            if step.position != position:
                self.steps.update(step, {"position": position})

    def _owned_step(self, step_id: str, user_id: str, verb: str = "modify") -> Step:
        if not step_id:
            raise ValidationError("Step Id is required")
        step = self.steps.get_by_id(step_id)
        if not step:
            raise EntityNotFoundError("Step not found")
        ensure_owner(self.demos.get_by_id(step.demo_id), user_id, verb, not_found="Step not found")
        return step
