"""Pydantic schemas for Hotspot domain.

Geometry is expressed in percent of the step image. Required fields are
optional here so the service can answer with its own validation message.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

TooltipPlacement = Literal["top", "bottom", "left", "right"]


class HotspotBase(BaseModel):
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    color: Optional[str] = None
    border_radius: Optional[float] = None
    tooltip_text: Optional[str] = None
    tooltip_placement: Optional[TooltipPlacement] = None
    target_step_id: Optional[str] = None


class HotspotDraft(HotspotBase):
    """Hotspot payload before its step exists."""


class HotspotCreate(HotspotBase):
    step_id: Optional[str] = None


class HotspotUpdate(HotspotBase):
    pass


class HotspotRead(BaseModel):
    id: str
    step_id: str
    x: float
    y: float
    width: float
    height: float
    color: str
    border_radius: float = 0
    tooltip_text: Optional[str] = None
    tooltip_placement: Optional[str] = None
    target_step_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class HotspotBulkDeleteResult(BaseModel):
    message: str
    deleted_count: int
