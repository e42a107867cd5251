"""Hotspot service — clickable regions on step images."""

from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from stepwise.application.services.access import ensure_owner, ensure_visible
from stepwise.application.services.auth_service import TokenVerifier
from stepwise.core.exceptions import EntityNotFoundError, ValidationError
from stepwise.core.results import action
from stepwise.domain.models.hotspot import Hotspot
from stepwise.domain.models.step import Step
from stepwise.domain.schemas.common import MessageResponse
from stepwise.domain.schemas.hotspot import (
    HotspotBulkDeleteResult,
    HotspotCreate,
    HotspotRead,
    HotspotUpdate,
)
from stepwise.infrastructure.database import transaction
from stepwise.infrastructure.repositories.demo_repository import SQLAlchemyDemoRepository
from stepwise.infrastructure.repositories.hotspot_repository import SQLAlchemyHotspotRepository
from stepwise.infrastructure.repositories.step_repository import SQLAlchemyStepRepository

logger = structlog.get_logger(__name__)

GEOMETRY_FIELDS = ("x", "y", "width", "height")
NON_NULLABLE_FIELDS = GEOMETRY_FIELDS + ("color", "border_radius")


def validate_geometry(x: float, y: float, width: float, height: float) -> None:
    """Coordinates are percentages of the step image."""
    if not (0 <= x <= 100 and 0 <= y <= 100):
        raise ValidationError("Hotspot position must be between 0 and 100")
    if not (0 < width <= 100 and 0 < height <= 100):
        raise ValidationError("Hotspot size must be greater than 0 and at most 100")


class HotspotService:
    def __init__(self, db: Session, verifier: TokenVerifier):
        self.db = db
        self.verifier = verifier
        self.demos = SQLAlchemyDemoRepository(db)
        self.steps = SQLAlchemyStepRepository(db)
        self.hotspots = SQLAlchemyHotspotRepository(db)

    @action("Failed to create hotspot. Please try again")
    def create_hotspot(self, payload: HotspotCreate, token: Optional[str]) -> HotspotRead:
        user_id = self.verifier.require_user_id(token)
        if not payload.step_id:
            raise ValidationError("Step ID is required")
        step = self._owned_step(payload.step_id, user_id)

        if any(getattr(payload, f) is None for f in GEOMETRY_FIELDS) or not payload.color:
            raise ValidationError("Position (x, y, width, height) and color are required")
        validate_geometry(payload.x, payload.y, payload.width, payload.height)
        if payload.border_radius is not None and payload.border_radius < 0:
            raise ValidationError("Border radius cannot be negative")
        if payload.target_step_id:
            self._check_target(payload.target_step_id, step)

        with transaction(self.db):
            hotspot = self.hotspots.create(
                {
                    "step_id": step.id,
                    "x": payload.x,
                    "y": payload.y,
                    "width": payload.width,
                    "height": payload.height,
                    "color": payload.color,
                    "border_radius": payload.border_radius or 0,
                    "tooltip_text": payload.tooltip_text,
                    "tooltip_placement": payload.tooltip_placement,
                    "target_step_id": payload.target_step_id or None,
                }
            )

        logger.info("Hotspot created", hotspot_id=hotspot.id, step_id=step.id)
        return HotspotRead.model_validate(hotspot)

    @action("Failed to fetch hotspots. Please try again")
    def list_by_step(self, step_id: str, token: Optional[str] = None) -> List[HotspotRead]:
        if not step_id:
            raise ValidationError("Step ID is required")
        step = self.steps.get_by_id(step_id)
        if not step:
            raise EntityNotFoundError("Step not found")
        ensure_visible(
            self.demos.get_by_id(step.demo_id),
            self.verifier.optional_user_id(token),
            not_found="Step not found",
        )
        return [HotspotRead.model_validate(h) for h in self.hotspots.list_by_step(step.id)]

    @action("Failed to fetch hotspot. Please try again")
    def get_hotspot(self, hotspot_id: str) -> HotspotRead:
        if not hotspot_id:
            raise ValidationError("Hotspot ID is required")
        hotspot = self.hotspots.get_by_id(hotspot_id)
        if not hotspot:
            raise EntityNotFoundError("Hotspot not found")
        return HotspotRead.model_validate(hotspot)

    @action("Failed to update hotspot. Please try again")
    def update_hotspot(
        self, hotspot_id: str, payload: HotspotUpdate, token: Optional[str]
    ) -> HotspotRead:
        user_id = self.verifier.require_user_id(token)
        hotspot, step = self._owned_hotspot(hotspot_id, user_id)

        changes = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or field not in NON_NULLABLE_FIELDS
        }
        if not changes:
            raise ValidationError("No fields to update")

        if any(f in changes for f in GEOMETRY_FIELDS):
            validate_geometry(*(changes.get(f, getattr(hotspot, f)) for f in GEOMETRY_FIELDS))
        if changes.get("border_radius", 0) < 0:
            raise ValidationError("Border radius cannot be negative")
        if "color" in changes and not changes["color"]:
            raise ValidationError("Color cannot be empty")
        if changes.get("target_step_id"):
            self._check_target(changes["target_step_id"], step)
        elif "target_step_id" in changes:
            changes["target_step_id"] = None

        with transaction(self.db):
            hotspot = self.hotspots.update(hotspot, changes)
        return HotspotRead.model_validate(hotspot)

    @action("Failed to delete hotspot. Please try again")
    def delete_hotspot(self, hotspot_id: str, token: Optional[str]) -> MessageResponse:
        user_id = self.verifier.require_user_id(token)
        hotspot, _ = self._owned_hotspot(hotspot_id, user_id, "delete")

        with transaction(self.db):
            self.hotspots.delete(hotspot)
        return MessageResponse(message="Hotspot deleted successfully")

    @action("Failed to delete hotspots. Please try again")
    def delete_all_for_step(self, step_id: str, token: Optional[str]) -> HotspotBulkDeleteResult:
        user_id = self.verifier.require_user_id(token)
        if not step_id:
            raise ValidationError("Step ID is required")
        step = self._owned_step(step_id, user_id, "delete")

        with transaction(self.db):
            deleted = len(self.hotspots.list_by_step(step.id))
            self.hotspots.delete_by_step(step.id)

        logger.info("Hotspots deleted", step_id=step.id, count=deleted)
        return HotspotBulkDeleteResult(
            message=f"{deleted} hotspot(s) deleted successfully", deleted_count=deleted
        )

    def _owned_step(self, step_id: str, user_id: str, verb: str = "modify") -> Step:
        step = self.steps.get_by_id(step_id)
        if not step:
            raise EntityNotFoundError("Step not found")
        ensure_owner(self.demos.get_by_id(step.demo_id), user_id, verb, not_found="Step not found")
        return step

    def _owned_hotspot(self, hotspot_id: str, user_id: str, verb: str = "modify"):
        if not hotspot_id:
            raise ValidationError("Hotspot ID is required")
        hotspot: Optional[Hotspot] = self.hotspots.get_by_id(hotspot_id)
        if not hotspot:
            raise EntityNotFoundError("Hotspot not found")
        step = self.steps.get_by_id(hotspot.step_id)
        ensure_owner(
            self.demos.get_by_id(step.demo_id), user_id, verb, not_found="Hotspot not found"
        )
        return hotspot, step

    def _check_target(self, target_step_id: str, step: Step) -> None:
        target = self.steps.get_by_id(target_step_id)
        if not target:
            raise EntityNotFoundError("Target step not found")
        if target.demo_id != step.demo_id:
            raise ValidationError("Target step must belong to the same demo")
