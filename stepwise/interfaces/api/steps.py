"""Step API routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from stepwise.application.services.hotspot_service import HotspotService
from stepwise.application.services.step_service import StepService
from stepwise.core.results import ActionResult
from stepwise.domain.schemas.common import MessageResponse
from stepwise.domain.schemas.hotspot import HotspotBulkDeleteResult, HotspotRead
from stepwise.domain.schemas.step import StepPositionUpdate, StepRead, StepUpdate
from stepwise.interfaces.api.deps import get_token, respond
from stepwise.interfaces.deps import get_hotspot_service, get_step_service

router = APIRouter(prefix="/api/steps", tags=["Steps"])


@router.get("/{step_id}", response_model=ActionResult[StepRead])
def get_step(step_id: str, service: StepService = Depends(get_step_service)):
    return respond(service.get_step(step_id))


@router.patch("/{step_id}", response_model=ActionResult[StepRead])
def update_step(
    step_id: str,
    body: StepUpdate,
    token: Optional[str] = Depends(get_token),
    service: StepService = Depends(get_step_service),
):
    return respond(service.update_step(step_id, body, token))


@router.patch("/{step_id}/position", response_model=ActionResult[List[StepRead]])
def change_step_order(
    step_id: str,
    body: StepPositionUpdate,
    token: Optional[str] = Depends(get_token),
    service: StepService = Depends(get_step_service),
):
    return respond(service.change_step_order(step_id, body.position, token))


@router.delete("/{step_id}", response_model=ActionResult[MessageResponse])
def delete_step(
    step_id: str,
    token: Optional[str] = Depends(get_token),
    service: StepService = Depends(get_step_service),
):
    return respond(service.delete_step(step_id, token))


@router.get("/{step_id}/hotspots", response_model=ActionResult[List[HotspotRead]])
def list_hotspots(
    step_id: str,
    token: Optional[str] = Depends(get_token),
    service: HotspotService = Depends(get_hotspot_service),
):
    return respond(service.list_by_step(step_id, token))


@router.delete("/{step_id}/hotspots", response_model=ActionResult[HotspotBulkDeleteResult])
def delete_hotspots(
    step_id: str,
    token: Optional[str] = Depends(get_token),
    service: HotspotService = Depends(get_hotspot_service),
):
    return respond(service.delete_all_for_step(step_id, token))
