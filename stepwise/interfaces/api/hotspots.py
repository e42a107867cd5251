"""Hotspot API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from stepwise.application.services.hotspot_service import HotspotService
from stepwise.core.results import ActionResult
from stepwise.domain.schemas.common import MessageResponse
from stepwise.domain.schemas.hotspot import HotspotCreate, HotspotRead, HotspotUpdate
from stepwise.interfaces.api.deps import get_token, respond
from stepwise.interfaces.deps import get_hotspot_service

router = APIRouter(prefix="/api/hotspots", tags=["Hotspots"])


@router.post("", response_model=ActionResult[HotspotRead], status_code=status.HTTP_201_CREATED)
def create_hotspot(
    body: HotspotCreate,
    token: Optional[str] = Depends(get_token),
    service: HotspotService = Depends(get_hotspot_service),
):
    return respond(service.create_hotspot(body, token))


@router.get("/{hotspot_id}", response_model=ActionResult[HotspotRead])
def get_hotspot(hotspot_id: str, service: HotspotService = Depends(get_hotspot_service)):
    return respond(service.get_hotspot(hotspot_id))


@router.patch("/{hotspot_id}", response_model=ActionResult[HotspotRead])
def update_hotspot(
    hotspot_id: str,
    body: HotspotUpdate,
    token: Optional[str] = Depends(get_token),
    service: HotspotService = Depends(get_hotspot_service),
):
    return respond(service.update_hotspot(hotspot_id, body, token))


@router.delete("/{hotspot_id}", response_model=ActionResult[MessageResponse])
def delete_hotspot(
    hotspot_id: str,
    token: Optional[str] = Depends(get_token),
    service: HotspotService = Depends(get_hotspot_service),
):
    return respond(service.delete_hotspot(hotspot_id, token))
