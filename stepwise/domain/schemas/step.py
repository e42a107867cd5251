"""Pydantic schemas for Step domain."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from stepwise.domain.schemas.hotspot import HotspotDraft, HotspotRead


class StepBase(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    position: Optional[int] = Field(None, ge=0)


class StepCreate(StepBase):
    pass


class StepUpdate(StepBase):
    pass


class StepPositionUpdate(BaseModel):
    position: int = Field(..., ge=0)


class StepReorder(BaseModel):
    step_ids: list[str]


class StepWithHotspotsCreate(StepCreate):
    hotspots: list[HotspotDraft] = []


class StepRead(BaseModel):
    id: str
    demo_id: str
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: str
    position: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StepWithHotspots(StepRead):
    hotspots: list[HotspotRead] = []
